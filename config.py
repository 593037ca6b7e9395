import logging
import os

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Error reading environment variable %s=%r, using %s", name, value, default)
        return default


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "agrocatalog")
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 10)

# HTTP
PORT = _env_int("PORT", 8000)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# JWT / Auth
SECRET_KEY = os.getenv("SECRET_KEY", "devsecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

# Timeouts (seconds)
OPERATION_TIMEOUT = 15
REQUEST_TIMEOUT = 5 * 60
