"""Domain errors. HTTP status mapping lives in main.py."""


class CatalogError(Exception):
    pass


class InvalidInputError(CatalogError):
    """The request can not be processed as given (client error)."""


class InvalidIdError(InvalidInputError):
    pass


class AuthenticationError(CatalogError):
    pass


class StoreError(CatalogError):
    """A database operation failed; the driver error is kept in __cause__."""
