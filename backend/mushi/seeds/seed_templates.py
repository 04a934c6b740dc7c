# mushi/seeds/seed_templates.py
from typing import List
from uuid import uuid4

from mushi.crud import template_crud
from mushi.db.store import RemoteStore
from mushi.models.template import Template

SAMPLE_TEMPLATES = [
    {
        "title": "Fashion - 100 (EN)",
        "canvaUrl": "https://www.canva.com/design/DAGi1AW8Lo0/qsw26-dSHEYFa3fQi9LJEQ/view?utm_content=DAGi1AW8L00&utm_campaign=designshare&utm_medium",
        "category": "FASHION",
        "format": "Feed",
        "imageUrl": "MUSHI Fashion - 100 (EN).png",
        "language": "EN",
        "popularity": 73,
        "savedCount": 0,
    },
    {
        "title": "Fashion - 101 (EN)",
        "canvaUrl": "https://www.canva.com/design/sample2/view",
        "category": "FASHION",
        "format": "Feed",
        "imageUrl": "MUSHI Fashion - 101 (EN).png",
        "language": "EN",
        "popularity": 65,
        "savedCount": 0,
    },
    {
        "title": "Fashion - 102 (ES)",
        "canvaUrl": "https://www.canva.com/design/sample3/view",
        "category": "FASHION",
        "format": "Story",
        "imageUrl": "MUSHI Fashion - 102 (ES).png",
        "language": "ES",
        "popularity": 58,
        "savedCount": 0,
    },
]


async def seed_templates(store: RemoteStore) -> List[Template]:
    """Replace the whole templates collection with the sample set."""
    templates = [Template(id=str(uuid4()), **data) for data in SAMPLE_TEMPLATES]
    await template_crud.delete_all_templates(store)
    await template_crud.insert_templates(store, templates)
    print(f"Templates seeded: {len(templates)}")
    return templates
