# mushi/routes/templates.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Path, Query

from mushi.core.config import settings
from mushi.core.error_messages import ErrorResponses
from mushi.crud import template_crud, user_crud
from mushi.db.database import get_store
from mushi.db.store import RemoteStore
from mushi.middleware.rbac import get_current_session
from mushi.models.session import Session
from mushi.models.template import FORMATS, INDUSTRIES, LANGUAGES
from mushi.schemas.template import (
    FilterOptionsResponse,
    SavedTemplatesResponse,
    TemplateListResponse,
    ToggleSaveResponse,
)
from mushi.services.cards import CARD_STYLES, build_cards
from mushi.services.filtering import FilterSelection, SortKey, apply_filters
from mushi.services.saved_set import adjust_saved_count, flip_membership
from mushi.services.template_repository import TemplateRepository
from mushi.utils.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

template_router = APIRouter(tags=["Templates"])


def get_template_repository(
    store: RemoteStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
) -> TemplateRepository:
    return TemplateRepository(
        store,
        storage,
        bucket=settings.TEMPLATES_BUCKET,
        placeholder_url=settings.PLACEHOLDER_IMAGE_URL,
    )


# -----------------------------
# Gallery listing
# -----------------------------
@template_router.get("", response_model=TemplateListResponse)
async def list_templates(
    industry: List[str] = Query(default=[]),
    format: List[str] = Query(default=[]),
    language: List[str] = Query(default=[]),
    sort: SortKey = Query(SortKey.POPULAR),
    limit: Optional[int] = Query(None, ge=1, description="Reveal window size, defaults to one page"),
    variant: Literal["grid", "compact"] = Query("grid"),
    repository: TemplateRepository = Depends(get_template_repository),
    store: RemoteStore = Depends(get_store),
    session: Session = Depends(get_current_session),
):
    templates = await repository.load_templates()
    user = await user_crud.get_or_create_user(store, session.user_id)

    selection = FilterSelection(industries=industry, formats=format, languages=language, sortKey=sort)
    ordered = apply_filters(templates, selection, user.savedTemplates)
    window = limit or settings.PAGE_SIZE

    return TemplateListResponse(
        items=build_cards(ordered[:window], user.savedTemplates, CARD_STYLES[variant]),
        total=len(ordered),
        hasMore=window < len(ordered),
    )


@template_router.get("/filters", response_model=FilterOptionsResponse)
async def get_filter_options():
    """Choices offered by the gallery filter bar."""
    return FilterOptionsResponse(
        industries=list(INDUSTRIES),
        formats=list(FORMATS),
        languages=list(LANGUAGES),
        sortKeys=[key.value for key in SortKey],
    )


@template_router.get("/saved", response_model=SavedTemplatesResponse)
async def get_saved_templates(
    store: RemoteStore = Depends(get_store),
    session: Session = Depends(get_current_session),
):
    user = await user_crud.get_or_create_user(store, session.user_id)
    return SavedTemplatesResponse(savedTemplates=user.savedTemplates)


# -----------------------------
# Save / unsave
# -----------------------------
@template_router.post("/{template_id}/toggle-save", response_model=ToggleSaveResponse)
async def toggle_save_template(
    template_id: str = Path(...),
    store: RemoteStore = Depends(get_store),
    session: Session = Depends(get_current_session),
):
    template = await template_crud.get_template(store, template_id)
    if not template:
        raise ErrorResponses.TEMPLATE_NOT_FOUND

    user = await user_crud.get_or_create_user(store, session.user_id)
    saved_ids, now_saved = flip_membership(user.savedTemplates, template_id)
    saved_count = adjust_saved_count(template.savedCount, now_saved)

    await user_crud.save_user_templates(store, session.user_id, saved_ids)
    try:
        await template_crud.update_saved_count(store, template_id, saved_count)
    except Exception as e:
        # The saved list is already written; a stale counter is tolerated.
        logger.warning("Failed to update savedCount for %s: %s", template_id, e)

    return ToggleSaveResponse(templateId=template_id, saved=now_saved, savedCount=saved_count)
