# mushi/services/gallery.py
"""
Template gallery controller.

Flow: the repository loads the catalog, the reconciler settles the saved set,
the filter engine orders the catalog, and the reveal window exposes a prefix
of that order. Toggles go back through the reconciler.

Every state change that follows an await checks the liveness flag first, so
results arriving after close() are dropped.
"""
import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel

from mushi.core.exceptions import AuthRequired, FetchError
from mushi.models.template import Template
from mushi.schemas.template import TemplateCard
from mushi.services.cards import GRID, CardStyle, build_cards
from mushi.services.filtering import FilterSelection, apply_filters
from mushi.services.reveal import RevealController
from mushi.services.saved_set import SavedSetReconciler, SyncResult, ToggleOutcome
from mushi.services.session import SessionContext
from mushi.services.template_repository import TemplateRepository

logger = logging.getLogger(__name__)

SAVE_FAILED_WARNING = "Failed to update save status. Please try again."


class GalleryView(BaseModel):
    items: List[TemplateCard]
    total: int
    hasMore: bool
    visibleCount: int
    error: Optional[str] = None
    warnings: List[str] = []


class TemplateGalleryController:
    def __init__(
        self,
        repository: TemplateRepository,
        reconciler: SavedSetReconciler,
        session_context: SessionContext,
        reveal: Optional[RevealController] = None,
        card_style: CardStyle = GRID,
    ):
        self.repository = repository
        self.reconciler = reconciler
        self.session_context = session_context
        self.reveal = reveal or RevealController()
        self.card_style = card_style

        self.templates: List[Template] = []
        self.selection = FilterSelection()
        self.error: Optional[str] = None
        self.warnings: List[str] = []
        self.is_loading = False
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    async def load(self) -> None:
        if self.session_context.get_session() is None:
            raise AuthRequired("/")

        self.is_loading = True
        try:
            try:
                templates = await self.repository.load_templates()
            except FetchError as e:
                logger.error("%s", e)
                if self._alive:
                    self.error = str(e)
                    self.templates = []
                return

            if not self._alive:
                return
            self.templates = templates

            try:
                await self.reconciler.initialize()
            except FetchError as e:
                logger.error("%s", e)
                if self._alive:
                    self.error = str(e)
        finally:
            if self._alive:
                self.is_loading = False

    # ------------------------
    # Filters and reveal window
    # ------------------------
    def update_filters(self, **changes) -> FilterSelection:
        selection = self.selection.with_changes(**changes)
        if selection != self.selection:
            self.selection = selection
            self.reveal.reset()
        return self.selection

    def filtered(self) -> List[Template]:
        return apply_filters(
            self.templates, self.selection, self.reconciler.saved_ids, position=self.reconciler.position
        )

    def view(self) -> GalleryView:
        ordered = self.filtered()
        visible = self.reveal.visible(ordered)
        return GalleryView(
            items=build_cards(visible, self.reconciler.saved_ids, self.card_style),
            total=len(ordered),
            hasMore=self.reveal.has_more(len(ordered)),
            visibleCount=self.reveal.visible_count,
            error=self.error,
            warnings=list(self.warnings),
        )

    def load_more(self) -> int:
        return self.reveal.load_more()

    def on_sentinel_visible(self) -> bool:
        return self.reveal.on_sentinel_visible()

    # ------------------------
    # Saving
    # ------------------------
    def commit_toggle(self, template_id: str) -> ToggleOutcome:
        """Local phase: saved set, cache and displayed savedCount."""
        current = next((t for t in self.templates if t.id == template_id), None)
        outcome = self.reconciler.toggle(template_id, current.savedCount if current else 0)
        if current is not None:
            self.templates = [
                t.model_copy(update={"savedCount": outcome.saved_count}) if t.id == template_id else t
                for t in self.templates
            ]
        return outcome

    async def reconcile_toggle(self, outcome: ToggleOutcome) -> SyncResult:
        """Remote phase. Never undoes the local phase."""
        result = await self.reconciler.persist(outcome)
        if not self._alive:
            return result
        if result.ok:
            self.error = None
        else:
            self.warnings.append(SAVE_FAILED_WARNING)
        return result

    async def toggle(self, template_id: str) -> SyncResult:
        outcome = self.commit_toggle(template_id)
        return await self.reconcile_toggle(outcome)

    def toggle_nowait(self, template_id: str) -> "asyncio.Task[SyncResult]":
        """Commit locally now and reconcile remotely in the background."""
        outcome = self.commit_toggle(template_id)
        return asyncio.get_running_loop().create_task(self.reconcile_toggle(outcome))

    def dismiss_warnings(self) -> None:
        self.warnings.clear()

    def close(self) -> None:
        self._alive = False
        self.reveal.close()
        self.reconciler.close()


def create_gallery_controller(session_context: SessionContext, store=None, storage=None,
                              cache=None, card_style: CardStyle = GRID) -> TemplateGalleryController:
    """Wire a controller from settings, with any collaborator overridable."""
    from mushi.core.config import settings
    from mushi.db.database import get_store
    from mushi.utils.local_cache import JsonFileCache
    from mushi.utils.storage import get_storage

    store = store or get_store()
    repository = TemplateRepository(
        store,
        storage or get_storage(),
        bucket=settings.TEMPLATES_BUCKET,
        placeholder_url=settings.PLACEHOLDER_IMAGE_URL,
    )
    reconciler = SavedSetReconciler(store, cache or JsonFileCache(settings.LOCAL_CACHE_PATH), session_context)
    reveal = RevealController(settings.PAGE_SIZE, settings.REVEAL_DEBOUNCE_SECONDS)
    return TemplateGalleryController(repository, reconciler, session_context, reveal, card_style)
