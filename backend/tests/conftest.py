"""
Shared fixtures: an in-memory store and object storage standing in for
MongoDB and S3/B2, plus session helpers.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from mushi.core.exceptions import StorageError
from mushi.db.store import TEMPLATES, USERS, RemoteStore
from mushi.models.session import Session
from mushi.models.template import Template
from mushi.services.session import SessionContext
from mushi.utils.auth_utils import create_access_token
from mushi.utils.local_cache import MemoryCache
from mushi.utils.storage import ObjectStorage

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeStore(RemoteStore):
    """Dict-backed store. Put method names in `failing` to make them raise."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {TEMPLATES: {}, USERS: {}}
        self.failing = set()
        self.calls: List[str] = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.failing:
            raise ConnectionError(f"simulated {name} failure")

    async def select(self, collection, query=None, limit=None):
        self._check("select")
        rows = [
            dict(row) for row in self.collections[collection].values()
            if all(row.get(k) == v for k, v in (query or {}).items())
        ]
        return rows[:limit] if limit else rows

    async def select_one(self, collection, row_id):
        self._check("select_one")
        row = self.collections[collection].get(row_id)
        return dict(row) if row else None

    async def insert(self, collection, rows):
        self._check("insert")
        for row in rows:
            self.collections[collection][row["_id"]] = dict(row)
        return [row["_id"] for row in rows]

    async def update(self, collection, row_id, fields):
        self._check("update")
        row = self.collections[collection].get(row_id)
        if row is None:
            return 0
        row.update(fields)
        return 1

    async def upsert(self, collection, row_id, fields):
        self._check("upsert")
        row = self.collections[collection].setdefault(row_id, {"_id": row_id})
        row.update(fields)

    async def delete(self, collection, query=None):
        self._check("delete")
        doomed = [
            row_id for row_id, row in self.collections[collection].items()
            if all(row.get(k) == v for k, v in (query or {}).items())
        ]
        for row_id in doomed:
            del self.collections[collection][row_id]
        return len(doomed)


class FakeStorage(ObjectStorage):
    def __init__(self, base_url: str = "https://cdn.example.com"):
        self.base_url = base_url
        self.broken = set()
        self.uploads: Dict[str, bytes] = {}

    async def public_url(self, bucket, file_name):
        if file_name in self.broken:
            raise StorageError(f"cannot resolve {file_name}")
        return f"{self.base_url}/{bucket}/{file_name}"

    async def upload(self, bucket, file_name, data, content_type=None, cache_control="3600", upsert=False):
        if "upload" in self.broken:
            raise StorageError("upload failed")
        self.uploads[f"{bucket}/{file_name}"] = data
        return file_name


def make_template(template_id: str, saved_count: int = 0, minutes: int = 0, **overrides) -> Template:
    data = dict(
        id=template_id,
        title=f"Template {template_id}",
        canvaUrl=f"https://www.canva.com/design/{template_id}/view",
        category="FASHION",
        format="Feed",
        imageUrl=f"https://cdn.example.com/{template_id}.png",
        language="EN",
        popularity=50,
        savedCount=saved_count,
        createdAt=BASE_TIME + timedelta(minutes=minutes),
    )
    data.update(overrides)
    return Template(**data)


def add_templates(store: FakeStore, templates) -> None:
    for t in templates:
        store.collections[TEMPLATES][t.id] = t.to_row()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def session() -> Session:
    return Session(user_id="user-1", email="user@example.com")


@pytest.fixture
def session_context(session) -> SessionContext:
    return SessionContext(session=session)


@pytest.fixture
def token() -> str:
    return create_access_token({"sub": "user-1", "email": "user@example.com"})


@pytest.fixture
def auth_headers(token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
