# mushi/db/database.py
from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient

from mushi.core.config import settings
from mushi.db.store import MongoStore, RemoteStore


@lru_cache
def get_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(settings.MONGO_URL)


def get_database():
    return get_client()[settings.MONGO_DB_NAME]


def get_store() -> RemoteStore:
    return MongoStore(get_database())
