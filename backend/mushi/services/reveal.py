# mushi/services/reveal.py
import asyncio
import logging
from typing import List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_SIZE = 20
DEBOUNCE_SECONDS = 0.5


class RevealController:
    """
    Growing prefix window over the sorted list. The window advances by one
    page on an explicit load_more() or, when the end-of-list sentinel comes
    into view, once per debounce period. Sentinel triggers that arrive while
    an advance is pending are dropped, not queued.
    """

    def __init__(self, page_size: int = PAGE_SIZE, debounce: float = DEBOUNCE_SECONDS):
        self.page_size = page_size
        self.debounce = debounce
        self.visible_count = page_size
        self._timer: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def in_flight(self) -> bool:
        return self._timer is not None

    def visible(self, items: Sequence[T]) -> List[T]:
        return list(items[: self.visible_count])

    def has_more(self, total: int) -> bool:
        return self.visible_count < total

    def load_more(self) -> int:
        self.visible_count += self.page_size
        return self.visible_count

    def on_sentinel_visible(self) -> bool:
        """Returns True when an advance was scheduled."""
        if self._closed or self.in_flight:
            return False
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce, self._advance)
        return True

    def _advance(self) -> None:
        self._timer = None
        if self._closed:
            return
        self.visible_count += self.page_size
        logger.debug("Reveal window grew to %d", self.visible_count)

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def reset(self) -> None:
        self._cancel()
        self.visible_count = self.page_size

    def close(self) -> None:
        self._closed = True
        self._cancel()
