# mushi/routes/profile.py
import logging
import time
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile

from mushi.core.config import settings
from mushi.core.error_messages import ErrorResponses
from mushi.core.exceptions import StorageError
from mushi.crud import user_crud
from mushi.db.database import get_store
from mushi.db.store import RemoteStore
from mushi.middleware.rbac import get_current_session
from mushi.models.session import Session
from mushi.schemas.profile import AvatarUploadResponse
from mushi.utils.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

profile_router = APIRouter(prefix="/profile", tags=["Profile"])

MAX_AVATAR_BYTES = 5 * 1024 * 1024
ALLOWED_AVATAR_TYPES = ("image/jpeg", "image/png", "image/gif")


def avatar_file_name(filename: str) -> str:
    ext = Path(filename or "").suffix.lstrip(".") or "png"
    return f"avatar-{int(time.time() * 1000)}.{ext}"


@profile_router.post("/avatar", response_model=AvatarUploadResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    store: RemoteStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
    session: Session = Depends(get_current_session),
):
    if file.content_type not in ALLOWED_AVATAR_TYPES:
        raise ErrorResponses.INVALID_FILE_TYPE

    content = await file.read()
    if len(content) > MAX_AVATAR_BYTES:
        raise ErrorResponses.FILE_TOO_LARGE

    file_name = avatar_file_name(file.filename)
    try:
        await storage.upload(
            settings.AVATARS_BUCKET,
            file_name,
            content,
            content_type=file.content_type,
            cache_control="3600",
            upsert=True,
        )
        avatar_url = await storage.public_url(settings.AVATARS_BUCKET, file_name)
    except StorageError as e:
        logger.error("Avatar upload for %s failed: %s", session.user_id, e)
        raise ErrorResponses.UPLOAD_FAILED

    await user_crud.update_user(store, session.user_id, {"avatar_url": avatar_url, "avatar_file": file_name})

    return {"msg": "Photo uploaded successfully!", "avatar_url": avatar_url, "avatar_file": file_name}
