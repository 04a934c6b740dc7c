# mushi/crud/template_crud.py
import logging
from typing import List, Optional

from mushi.db.store import TEMPLATES, RemoteStore
from mushi.models.template import Template

logger = logging.getLogger(__name__)


# Get all template rows, skipping ones that fail validation
async def get_all_templates(store: RemoteStore, limit: Optional[int] = None) -> List[Template]:
    rows = await store.select(TEMPLATES, limit=limit)
    templates = []
    for row in rows:
        try:
            templates.append(Template.from_row(row))
        except ValueError as e:
            logger.warning("Skipping malformed template row %s: %s", row.get("_id"), e)
    return templates


# Get template by ID
async def get_template(store: RemoteStore, template_id: str) -> Optional[Template]:
    row = await store.select_one(TEMPLATES, template_id)
    return Template.from_row(row) if row else None


# Update the persisted savedCount
async def update_saved_count(store: RemoteStore, template_id: str, saved_count: int) -> int:
    return await store.update(TEMPLATES, template_id, {"savedCount": max(0, saved_count)})


# Replace the whole catalog
async def delete_all_templates(store: RemoteStore) -> int:
    return await store.delete(TEMPLATES)


async def insert_templates(store: RemoteStore, templates: List[Template]) -> List[str]:
    return await store.insert(TEMPLATES, [t.to_row() for t in templates])
