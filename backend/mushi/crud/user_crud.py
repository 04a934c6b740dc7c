# mushi/crud/user_crud.py
from typing import Any, Dict, List, Optional

from mushi.db.store import USERS, RemoteStore
from mushi.models.user import UserRecord


async def get_user(store: RemoteStore, user_id: str) -> Optional[UserRecord]:
    row = await store.select_one(USERS, user_id)
    return UserRecord.from_row(row) if row else None


async def create_user(store: RemoteStore, user_id: str) -> UserRecord:
    await store.insert(USERS, [{"_id": user_id, "savedTemplates": []}])
    return UserRecord(id=user_id)


async def get_or_create_user(store: RemoteStore, user_id: str) -> UserRecord:
    user = await get_user(store, user_id)
    if user is None:
        user = await create_user(store, user_id)
    return user


# Full replace of the saved list, creating the row when missing
async def save_user_templates(store: RemoteStore, user_id: str, saved_ids: List[str]) -> None:
    await store.upsert(USERS, user_id, {"savedTemplates": list(saved_ids)})


async def update_user(store: RemoteStore, user_id: str, fields: Dict[str, Any]) -> None:
    await store.upsert(USERS, user_id, fields)
