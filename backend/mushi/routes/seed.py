# mushi/routes/seed.py
from fastapi import APIRouter, Depends

from mushi.db.database import get_store
from mushi.db.store import RemoteStore
from mushi.schemas.template import SeedResponse
from mushi.seeds.seed_templates import seed_templates

seed_router = APIRouter(tags=["Seed"])


@seed_router.get("", response_model=SeedResponse)
async def seed(store: RemoteStore = Depends(get_store)):
    templates = await seed_templates(store)
    return SeedResponse(
        message="Templates seeded successfully",
        count=len(templates),
        templates=[t.model_dump(mode="json") for t in templates],
    )
