# mushi/services/template_repository.py
import asyncio
import logging
from typing import List, Optional

from mushi.core.exceptions import FetchError
from mushi.crud import template_crud
from mushi.db.store import RemoteStore
from mushi.models.template import Template
from mushi.utils.storage import ObjectStorage

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "templates/"
PLACEHOLDER_IMAGE = "/mushi-logo.png"


def is_absolute_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def storage_file_name(image_ref: str) -> str:
    """
    Turn a stored image reference into a bucket file name:
    drop the "templates/" path prefix and any query string, then trim
    whitespace and slashes.
    """
    name = image_ref
    if name.startswith(STORAGE_PREFIX):
        name = name[len(STORAGE_PREFIX):]
    name = name.split("?")[0]
    return name.strip().strip("/")


class TemplateRepository:
    def __init__(self, store: RemoteStore, storage: ObjectStorage,
                 bucket: str = "templates", placeholder_url: str = PLACEHOLDER_IMAGE):
        self.store = store
        self.storage = storage
        self.bucket = bucket
        self.placeholder_url = placeholder_url

    async def load_templates(self) -> List[Template]:
        """
        Fetch the catalog and resolve every image reference. Raises FetchError
        if the catalog cannot be read; a bad image never fails the load.
        """
        try:
            templates = await template_crud.get_all_templates(self.store)
        except Exception as e:
            raise FetchError(f"Could not load templates: {e}") from e

        urls = await asyncio.gather(*(self.resolve_image(t.imageUrl) for t in templates))
        return [t.model_copy(update={"imageUrl": url}) for t, url in zip(templates, urls)]

    async def resolve_image(self, image_ref: Optional[str]) -> str:
        if not image_ref or not image_ref.strip():
            return self.placeholder_url
        if is_absolute_url(image_ref):
            return image_ref

        file_name = storage_file_name(image_ref)
        if not file_name:
            return self.placeholder_url
        try:
            url = await self.storage.public_url(self.bucket, file_name)
        except Exception as e:
            logger.debug("Image %r fell back to placeholder: %s", image_ref, e)
            return self.placeholder_url
        return url or self.placeholder_url
