"""
Use cases for every entity.

Services are mostly pass-throughs to their repository. Writes that have a
populated view re-read it after the write so callers always get the same
shape as a find-by-id.
"""
from typing import List, Optional

from errors import AuthenticationError, InvalidInputError
from repositories import (
    CityRepository,
    CountryRepository,
    CropRepository,
    ItemRepository,
    SupplierRepository,
    UserRepository,
    VariantRepository,
)
from schemas import (
    CityCreate,
    CityOut,
    CityUpdate,
    CountryCreate,
    CountryOut,
    CountryStateCreate,
    CountryStateUpdate,
    CountryUpdate,
    CropCreate,
    CropOut,
    CropUpdate,
    ItemCreate,
    ItemOut,
    ItemUpdate,
    LoginInput,
    SupplierCreate,
    SupplierOut,
    SupplierUpdate,
    TokenResponse,
    UserCreate,
    UserOut,
    UserUpdate,
    VariantCreate,
    VariantOut,
    VariantUpdate,
)
from security import create_access_token, verify_password

AUTHENTICATION_FAILED = "Authentication failed. Wrong user or password."


class SupplierService:
    def __init__(self, repository: SupplierRepository, crop_repository: CropRepository):
        self.repository = repository
        self.crop_repository = crop_repository

    def find_supplier_by_id(self, supplier_id: str) -> Optional[SupplierOut]:
        return self.repository.populate_by_id(supplier_id)

    def find_all_suppliers(self) -> List[SupplierOut]:
        return self.repository.find_all()

    def create_supplier(self, dto: SupplierCreate) -> Optional[SupplierOut]:
        supplier_id = self.repository.insert(dto)
        return self.repository.populate_by_id(supplier_id)

    def update_supplier_by_id(self, supplier_id: str, dto: SupplierUpdate) -> Optional[SupplierOut]:
        if self.repository.update(supplier_id, dto) is None:
            return None
        return self.repository.populate_by_id(supplier_id)

    def delete_supplier(self, supplier_id: str) -> bool:
        return self.repository.delete(supplier_id)

    def add_crop(self, supplier_id: str, dto: CropCreate) -> Optional[SupplierOut]:
        """Register a crop grown by the supplier and return the populated supplier."""
        if not self.repository.exists(supplier_id):
            return None
        self.crop_repository.insert(dto.model_copy(update={"supplierId": supplier_id}))
        return self.repository.populate_by_id(supplier_id)


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def find_user_by_id(self, user_id: str) -> Optional[UserOut]:
        return self.repository.populate_by_id(user_id)

    def find_all_users(self) -> List[UserOut]:
        return self.repository.find_all()

    def _ensure_email_available(self, email: str, user_id: Optional[str] = None) -> None:
        owner = self.repository.find_by_email(email)
        if owner is not None and owner.id != user_id:
            raise InvalidInputError("Email already registered")

    def signup(self, dto: UserCreate) -> Optional[UserOut]:
        self._ensure_email_available(dto.email)
        user_id = self.repository.insert(dto)
        return self.repository.populate_by_id(user_id)

    def update_user_by_id(self, user_id: str, dto: UserUpdate) -> Optional[UserOut]:
        if dto.email is not None:
            self._ensure_email_available(dto.email, user_id)
        if self.repository.update(user_id, dto) is None:
            return None
        return self.repository.populate_by_id(user_id)

    def delete_user(self, user_id: str) -> bool:
        return self.repository.delete(user_id)


class AuthService:
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def login(self, dto: LoginInput) -> TokenResponse:
        # same error whether the email is unknown or the password is wrong
        credentials = self.user_repository.find_by_email(dto.email)
        if credentials is None or not verify_password(dto.password, credentials.hashedPassword):
            raise AuthenticationError(AUTHENTICATION_FAILED)
        user = self.user_repository.populate_by_id(credentials.id)
        if user is None:
            raise AuthenticationError(AUTHENTICATION_FAILED)
        token = create_access_token({"sub": user.id, "role": user.role})
        return TokenResponse(access_token=token, user=user)


class CropService:
    def __init__(self, repository: CropRepository):
        self.repository = repository

    def find_crop_by_id(self, crop_id: str) -> Optional[CropOut]:
        return self.repository.find_by_id(crop_id)

    def find_all_crops(self) -> List[CropOut]:
        return self.repository.find_all()

    def create_crop(self, dto: CropCreate) -> Optional[CropOut]:
        crop_id = self.repository.insert(dto)
        return self.repository.find_by_id(crop_id)

    def update_crop_by_id(self, crop_id: str, dto: CropUpdate) -> Optional[CropOut]:
        if self.repository.update(crop_id, dto) is None:
            return None
        return self.repository.find_by_id(crop_id)

    def delete_crop_by_id(self, crop_id: str) -> bool:
        return self.repository.delete(crop_id)


class CountryService:
    def __init__(self, repository: CountryRepository):
        self.repository = repository

    def find_country_by_id(self, country_id: str) -> Optional[CountryOut]:
        return self.repository.find_by_id(country_id)

    def find_all_countries(self) -> List[CountryOut]:
        return self.repository.find_all()

    def create_country(self, dto: CountryCreate) -> Optional[CountryOut]:
        country_id = self.repository.insert(dto)
        return self.repository.find_by_id(country_id)

    def update_country_by_id(self, country_id: str, dto: CountryUpdate) -> Optional[CountryOut]:
        return self.repository.update(country_id, dto)

    def delete_country(self, country_id: str) -> bool:
        return self.repository.delete(country_id)

    def add_state(self, country_id: str, dto: CountryStateCreate) -> Optional[CountryOut]:
        return self.repository.insert_state(country_id, dto)

    def update_state(self, country_id: str, state_id: str, dto: CountryStateUpdate) -> Optional[CountryOut]:
        return self.repository.update_state(country_id, state_id, dto)

    def delete_state(self, country_id: str, state_id: str) -> Optional[CountryOut]:
        return self.repository.delete_state(country_id, state_id)


class CityService:
    def __init__(self, repository: CityRepository):
        self.repository = repository

    def find_all_cities(self) -> List[CityOut]:
        return self.repository.find_all()

    def find_cities_by_country_state(self, state_id: str) -> List[CityOut]:
        return self.repository.find_by_country_state(state_id)

    def find_city(self, state_id: str, city_id: str) -> Optional[CityOut]:
        return self.repository.find_one_by_state(state_id, city_id)

    def create_city(self, state_id: str, dto: CityCreate) -> Optional[CityOut]:
        city_id = self.repository.insert(state_id, dto)
        return self.repository.find_one_by_state(state_id, city_id)

    def update_city(self, state_id: str, city_id: str, dto: CityUpdate) -> Optional[CityOut]:
        return self.repository.update(state_id, city_id, dto)

    def delete_city(self, state_id: str, city_id: str) -> bool:
        return self.repository.delete(state_id, city_id)


class ItemService:
    def __init__(self, repository: ItemRepository):
        self.repository = repository

    def find_item_by_id(self, item_id: str) -> Optional[ItemOut]:
        return self.repository.find_by_id(item_id)

    def find_all_items(self) -> List[ItemOut]:
        return self.repository.find_all()

    def create_item(self, dto: ItemCreate) -> Optional[ItemOut]:
        item_id = self.repository.insert(dto)
        return self.repository.find_by_id(item_id)

    def update_item_by_id(self, item_id: str, dto: ItemUpdate) -> Optional[ItemOut]:
        return self.repository.update(item_id, dto)

    def delete_item(self, item_id: str) -> bool:
        return self.repository.delete(item_id)


class VariantService:
    def __init__(self, repository: VariantRepository):
        self.repository = repository

    def find_variants_by_item_id(self, item_id: str) -> List[VariantOut]:
        return self.repository.find_by_item_id(item_id)

    def find_variant(self, item_id: str, variant_id: str) -> Optional[VariantOut]:
        return self.repository.find_one_by_item_id(item_id, variant_id)

    def create_variant(self, item_id: str, dto: VariantCreate) -> Optional[VariantOut]:
        variant_id = self.repository.insert(item_id, dto)
        return self.repository.find_one_by_item_id(item_id, variant_id)

    def update_variant(self, item_id: str, variant_id: str, dto: VariantUpdate) -> Optional[VariantOut]:
        return self.repository.update(item_id, variant_id, dto)

    def delete_variant(self, item_id: str, variant_id: str) -> bool:
        return self.repository.delete(item_id, variant_id)
