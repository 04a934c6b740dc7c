# mushi/services/filtering.py
from enum import Enum
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from mushi.models.template import Template


class SortKey(str, Enum):
    POPULAR = "popular"
    NEWEST = "newest"
    OLDEST = "oldest"
    SAVED = "saved"


def _as_strings(values) -> List[str]:
    # A bare string is one choice, not a sequence of letters.
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


class FilterSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    industries: FrozenSet[str] = frozenset()
    formats: FrozenSet[str] = frozenset()
    languages: FrozenSet[str] = frozenset()
    sortKey: SortKey = SortKey.POPULAR

    @field_validator("industries", "languages", mode="before")
    @classmethod
    def _upper(cls, values):
        return frozenset(v.upper() for v in _as_strings(values))

    @field_validator("formats", mode="before")
    @classmethod
    def _as_set(cls, values):
        return frozenset(_as_strings(values))

    def with_changes(self, **changes) -> "FilterSelection":
        data = self.model_dump()
        data.update(changes)
        return FilterSelection(**data)


def toggle_choice(values: Iterable[str], value: str) -> FrozenSet[str]:
    """Filter bar click: deselect when present, otherwise add."""
    current = frozenset(values)
    if value in current:
        return current - {value}
    return current | {value}


def matches(template: Template, selection: FilterSelection, saved: FrozenSet[str]) -> bool:
    if selection.industries and template.category.upper() not in selection.industries:
        return False
    if selection.formats and template.format not in selection.formats:
        return False
    if selection.languages and template.language.upper() not in selection.languages:
        return False
    if selection.sortKey == SortKey.SAVED and template.id not in saved:
        return False
    return True


def apply_filters(templates: Sequence[Template], selection: FilterSelection,
                  saved_ids: Sequence[str],
                  position: Optional[Callable[[str], int]] = None) -> List[Template]:
    """
    Filter then sort. sorted() is stable, so ties keep catalog order in every
    direction.

    position maps a template id to its index in save order (-1 when unsaved);
    by default it is derived from saved_ids.
    """
    saved = frozenset(saved_ids)
    filtered = [t for t in templates if matches(t, selection, saved)]

    key = selection.sortKey
    if key == SortKey.NEWEST:
        return sorted(filtered, key=lambda t: t.createdAt, reverse=True)
    if key == SortKey.OLDEST:
        return sorted(filtered, key=lambda t: t.createdAt)
    if key == SortKey.SAVED:
        if position is None:
            order = {template_id: idx for idx, template_id in enumerate(saved_ids)}
            return sorted(filtered, key=lambda t: order.get(t.id, -1), reverse=True)
        return sorted(filtered, key=lambda t: position(t.id), reverse=True)
    return sorted(filtered, key=lambda t: t.savedCount, reverse=True)
