# mushi/utils/s3_utils.py
import asyncio
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from mushi.core.config import settings
from mushi.core.exceptions import StorageError
from mushi.utils.storage import ObjectStorage


class S3Storage(ObjectStorage):
    def __init__(self, client=None, region: Optional[str] = None, public: Optional[bool] = None):
        self.region = region or settings.AWS_REGION
        self.public = settings.BUCKET_PUBLIC if public is None else public
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=self.region,
        )

    async def public_url(self, bucket: str, file_name: str) -> str:
        if self.public:
            return f"https://{bucket}.s3.{self.region}.amazonaws.com/{quote(file_name)}"
        try:
            return await asyncio.to_thread(
                self.client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": file_name},
                ExpiresIn=3600,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not presign {bucket}/{file_name}: {e}") from e

    async def upload(self, bucket, file_name, data, content_type=None, cache_control="3600", upsert=False):
        if not upsert and await self._exists(bucket, file_name):
            raise StorageError(f"{bucket}/{file_name} already exists")

        extra = {"CacheControl": f"max-age={cache_control}"}
        if content_type:
            extra["ContentType"] = content_type
        try:
            await asyncio.to_thread(
                self.client.put_object, Bucket=bucket, Key=file_name, Body=data, **extra
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload of {bucket}/{file_name} failed: {e}") from e
        return file_name

    async def _exists(self, bucket: str, file_name: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=bucket, Key=file_name)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"Could not check {bucket}/{file_name}: {e}") from e
