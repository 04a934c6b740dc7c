# mushi/db/store.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

TEMPLATES = "templates"
USERS = "users"


class RemoteStore(ABC):
    """
    Row-level access to the named collections. Rows are plain dicts keyed by
    "_id".
    """

    @abstractmethod
    async def select(self, collection: str, query: Optional[Dict[str, Any]] = None,
                     limit: Optional[int] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def select_one(self, collection: str, row_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert(self, collection: str, rows: List[Dict[str, Any]]) -> List[str]:
        ...

    @abstractmethod
    async def update(self, collection: str, row_id: str, fields: Dict[str, Any]) -> int:
        """Returns the number of matched rows."""

    @abstractmethod
    async def upsert(self, collection: str, row_id: str, fields: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Returns the number of deleted rows. An empty query deletes everything."""


class MongoStore(RemoteStore):
    def __init__(self, db):
        self.db = db

    async def select(self, collection, query=None, limit=None):
        cursor = self.db[collection].find(query or {})
        return await cursor.to_list(length=limit)

    async def select_one(self, collection, row_id):
        return await self.db[collection].find_one({"_id": row_id})

    async def insert(self, collection, rows):
        if not rows:
            return []
        result = await self.db[collection].insert_many(rows)
        return [str(inserted) for inserted in result.inserted_ids]

    async def update(self, collection, row_id, fields):
        result = await self.db[collection].update_one({"_id": row_id}, {"$set": fields})
        return result.matched_count

    async def upsert(self, collection, row_id, fields):
        await self.db[collection].update_one({"_id": row_id}, {"$set": fields}, upsert=True)

    async def delete(self, collection, query=None):
        result = await self.db[collection].delete_many(query or {})
        return result.deleted_count
