"""
MongoDB connection for the catalog.

A single MongoClient is shared by every request; pymongo pools the
underlying connections (maxPoolSize comes from DB_POOL_SIZE).
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

import config

logger = logging.getLogger(__name__)

# Collection names
SUPPLIERS = "suppliers"
USERS = "users"
CROPS = "crops"
COUNTRIES = "countries"
CITIES = "cities"
ITEMS = "items"
VARIANTS = "variants"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(
            config.DATABASE_URL,
            maxPoolSize=config.DB_POOL_SIZE,
            serverSelectionTimeoutMS=config.OPERATION_TIMEOUT * 1000,
        )
    return _client


def connect() -> MongoClient:
    client = get_client()
    client.admin.command("ping")
    logger.info("Connected to MongoDB database %s", config.DATABASE_NAME)
    return client


def close() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")


def get_db() -> Database:
    return get_client()[config.DATABASE_NAME]
