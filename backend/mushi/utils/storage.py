# mushi/utils/storage.py
from abc import ABC, abstractmethod
from typing import Optional

from mushi.core.config import settings


class ObjectStorage(ABC):
    @abstractmethod
    async def public_url(self, bucket: str, file_name: str) -> str:
        """Return a URL the browser can load for bucket/file_name."""

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        file_name: str,
        data: bytes,
        content_type: Optional[str] = None,
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> str:
        """Store data under file_name and return the stored key. Raises StorageError."""


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """
    Storage backend selected by STORAGE_BACKEND, built once per process.
    """
    global _storage
    if _storage is None:
        if settings.STORAGE_BACKEND == "b2":
            from mushi.utils.b2_utils import B2Storage
            _storage = B2Storage()
        else:
            from mushi.utils.s3_utils import S3Storage
            _storage = S3Storage()
    return _storage
