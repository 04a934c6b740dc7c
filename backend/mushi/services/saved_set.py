# mushi/services/saved_set.py
"""
Saved-template set for the signed-in user.

The local cache is written synchronously on every toggle and is the source of
truth for the session. Each user has their own cache entry, and the working
set is swapped out whenever the signed-in user changes. The remote user row is
only read to seed an empty local set (replace-wins, no union), and is written
best-effort after each toggle without ever rolling the local state back.
"""
import asyncio
import json
import logging
from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel

from mushi.core.exceptions import FetchError, RemotePersistError
from mushi.crud import template_crud, user_crud
from mushi.db.store import RemoteStore
from mushi.models.session import Session
from mushi.services.session import SessionContext
from mushi.utils.local_cache import LocalCache

logger = logging.getLogger(__name__)

CACHE_KEY = "savedTemplates"


def cache_key(user_id: Optional[str]) -> str:
    """Cache entry for one user; signed-out toggles share the bare key."""
    return f"{CACHE_KEY}:{user_id}" if user_id else CACHE_KEY


class ReconcilerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOCAL_LOADED = "local_loaded"
    RECONCILED = "reconciled"


class ToggleOutcome(BaseModel):
    template_id: str
    saved: bool
    saved_count: int
    saved_ids: Tuple[str, ...]
    user_id: Optional[str] = None


class SyncResult(BaseModel):
    template_id: str
    ok: bool
    error: Optional[str] = None


def flip_membership(saved_ids: Sequence[str], template_id: str) -> Tuple[List[str], bool]:
    """
    Remove template_id if present, else append it. Returns the new list and
    whether the id is now saved.
    """
    if template_id in saved_ids:
        return [i for i in saved_ids if i != template_id], False
    return list(saved_ids) + [template_id], True


def adjust_saved_count(saved_count: int, now_saved: bool) -> int:
    return max(0, (saved_count or 0) + (1 if now_saved else -1))


class SavedSetReconciler:
    def __init__(self, store: RemoteStore, cache: LocalCache, session_context: SessionContext):
        self.store = store
        self.cache = cache
        self.session_context = session_context
        self.state = ReconcilerState.UNINITIALIZED
        self.user_id: Optional[str] = None
        self._saved: List[str] = []
        self._alive = True
        self._unsubscribe = None
        self._pending: Set[asyncio.Task] = set()

    # ------------------------
    # Read side
    # ------------------------
    @property
    def saved_ids(self) -> Tuple[str, ...]:
        return tuple(self._saved)

    def is_saved(self, template_id: str) -> bool:
        return template_id in self._saved

    def position(self, template_id: str) -> int:
        """Index in save order, -1 when not saved."""
        try:
            return self._saved.index(template_id)
        except ValueError:
            return -1

    # ------------------------
    # Initialization
    # ------------------------
    async def initialize(self) -> None:
        session = self.session_context.get_session()
        self._load_user(session.user_id if session else None)
        if self._unsubscribe is None:
            self._unsubscribe = self.session_context.subscribe(self._on_session_change)

        if self._saved:
            logger.debug("Saved set for %s loaded from local cache (%d ids)", self.user_id, len(self._saved))
            return

        if session is not None:
            await self.sync_from_remote()

    def _load_user(self, user_id: Optional[str]) -> None:
        """Make user_id's cached set the working set."""
        self.user_id = user_id
        self._saved = self._read_cache()
        self.state = ReconcilerState.LOCAL_LOADED

    def _follow_session(self) -> None:
        session = self.session_context.get_session()
        user_id = session.user_id if session else None
        if self.state is ReconcilerState.UNINITIALIZED or user_id != self.user_id:
            self._load_user(user_id)

    async def sync_from_remote(self) -> None:
        """
        Seed an empty working set from the user's row. A missing row is
        created empty. Raises FetchError when the read fails.
        """
        session = self.session_context.get_session()
        if session is None:
            return
        user_id = session.user_id
        if user_id != self.user_id:
            self._load_user(user_id)

        try:
            user = await user_crud.get_user(self.store, user_id)
        except Exception as e:
            raise FetchError(f"Could not load saved templates: {e}") from e

        if not self._alive or self.user_id != user_id:
            return

        if user is None:
            try:
                await user_crud.create_user(self.store, user_id)
            except Exception as e:
                logger.warning("Could not create user row for %s: %s", user_id, e)
            remote: List[str] = []
        else:
            remote = list(user.savedTemplates)

        if not self._alive or self.user_id != user_id:
            return

        # A toggle made while the read was in flight already owns the set.
        if remote and not self._saved:
            self._saved = remote
            self._write_cache()
        self.state = ReconcilerState.RECONCILED

    def _on_session_change(self, session: Optional[Session]) -> None:
        if not self._alive:
            return
        user_id = session.user_id if session else None
        if user_id != self.user_id:
            logger.info("Signed-in user changed; switching saved set to %s", user_id)
            for task in list(self._pending):
                task.cancel()
            self._load_user(user_id)
        if session is None or self._saved:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; remote seed deferred until initialize()")
            return
        task = loop.create_task(self._seed_quietly())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _seed_quietly(self) -> None:
        try:
            await self.sync_from_remote()
        except FetchError as e:
            logger.warning("%s", e)

    async def wait_idle(self) -> None:
        """Wait for background remote seeds started by session changes."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------
    # Toggle: local commit, then remote reconciliation
    # ------------------------
    def toggle(self, template_id: str, saved_count: int = 0) -> ToggleOutcome:
        self._follow_session()
        self._saved, now_saved = flip_membership(self._saved, template_id)
        self._write_cache()
        return ToggleOutcome(
            template_id=template_id,
            saved=now_saved,
            saved_count=adjust_saved_count(saved_count, now_saved),
            saved_ids=tuple(self._saved),
            user_id=self.user_id,
        )

    async def persist(self, outcome: ToggleOutcome) -> SyncResult:
        """
        Write the outcome to its owner's row. An outcome committed for another
        user (or while signed out) is never written to the current user's row.
        """
        session = self.session_context.get_session()
        try:
            if session is None:
                raise RemotePersistError("No session; change kept locally only")
            if outcome.user_id != session.user_id:
                raise RemotePersistError(
                    f"Toggle was made for {outcome.user_id or 'a signed-out user'}, not {session.user_id}"
                )
            await user_crud.save_user_templates(self.store, session.user_id, list(outcome.saved_ids))
            await template_crud.update_saved_count(self.store, outcome.template_id, outcome.saved_count)
        except Exception as e:
            logger.warning("Remote save of template %s failed: %s", outcome.template_id, e)
            return SyncResult(template_id=outcome.template_id, ok=False, error=str(e))

        if self._alive and self.user_id == outcome.user_id:
            self.state = ReconcilerState.RECONCILED
        return SyncResult(template_id=outcome.template_id, ok=True)

    # ------------------------
    # Local cache
    # ------------------------
    def _read_cache(self) -> List[str]:
        raw = self.cache.get(cache_key(self.user_id))
        if not raw:
            return []
        try:
            ids = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt saved-template cache entry")
            return []
        if not isinstance(ids, list):
            return []
        return [str(i) for i in ids]

    def _write_cache(self) -> None:
        self.cache.set(cache_key(self.user_id), json.dumps(self._saved))

    def close(self) -> None:
        self._alive = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._pending):
            task.cancel()
