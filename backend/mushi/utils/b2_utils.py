# mushi/utils/b2_utils.py
import asyncio
from typing import Optional
from urllib.parse import quote

from b2sdk.v2 import B2Api, InMemoryAccountInfo
from b2sdk.v2.exception import B2Error, FileNotPresent

from mushi.core.config import settings
from mushi.core.exceptions import StorageError
from mushi.utils.storage import ObjectStorage


class B2Storage(ObjectStorage):
    """
    Backblaze B2 backend. The account is authorized on first use so that
    importing the module never touches the network.
    """

    def __init__(self, api: Optional[B2Api] = None, public: Optional[bool] = None, ttl_seconds: int = 3600):
        self.public = settings.BUCKET_PUBLIC if public is None else public
        self.ttl_seconds = ttl_seconds
        self._api = api
        self._authorized = api is not None

    @property
    def api(self) -> B2Api:
        if self._api is None:
            self._api = B2Api(InMemoryAccountInfo())
        if not self._authorized:
            self._api.authorize_account("production", settings.B2_KEY_ID, settings.B2_APPLICATION_KEY)
            self._authorized = True
        return self._api

    def _signed_url(self, bucket_name: str, file_name: str) -> str:
        bucket = self.api.get_bucket_by_name(bucket_name)
        url = self.api.get_download_url_for_file_name(bucket_name, file_name)
        if self.public:
            return url
        token = bucket.get_download_authorization(file_name, self.ttl_seconds)
        return f"{url}?Authorization={quote(token)}"

    async def public_url(self, bucket: str, file_name: str) -> str:
        try:
            return await asyncio.to_thread(self._signed_url, bucket, file_name)
        except B2Error as e:
            raise StorageError(f"Could not resolve {bucket}/{file_name}: {e}") from e

    def _upload(self, bucket_name, file_name, data, content_type, cache_control, upsert):
        bucket = self.api.get_bucket_by_name(bucket_name)
        if not upsert:
            try:
                bucket.get_file_info_by_name(file_name)
            except FileNotPresent:
                pass
            else:
                raise StorageError(f"{bucket_name}/{file_name} already exists")

        bucket.upload_bytes(
            data,
            file_name,
            content_type=content_type or "b2/x-auto",
            file_info={"b2-cache-control": f"max-age={cache_control}"},
        )
        return file_name

    async def upload(self, bucket, file_name, data, content_type=None, cache_control="3600", upsert=False):
        try:
            return await asyncio.to_thread(
                self._upload, bucket, file_name, data, content_type, cache_control, upsert
            )
        except B2Error as e:
            raise StorageError(f"Upload of {bucket}/{file_name} failed: {e}") from e
