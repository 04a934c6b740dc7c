# mushi/services/cards.py
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict

from mushi.models.template import Template
from mushi.schemas.template import TemplateCard


class CardStyle(BaseModel):
    """Presentation options for the single template card shape."""

    model_config = ConfigDict(frozen=True)

    variant: str = "grid"          # "grid" | "compact"
    show_link: bool = True
    price: int = 0


GRID = CardStyle()
COMPACT = CardStyle(variant="compact", show_link=False)
CARD_STYLES = {style.variant: style for style in (GRID, COMPACT)}


def build_card(template: Template, saved: bool, style: CardStyle = GRID) -> TemplateCard:
    return TemplateCard(
        id=template.id,
        title=template.title,
        description=template.category,
        imageUrl=template.imageUrl or "",
        canvaUrl=template.canvaUrl if style.show_link else None,
        price=style.price,
        author=template.language,
        isSaved=saved,
        savedCount=template.savedCount,
        variant=style.variant,
    )


def build_cards(templates: Iterable[Template], saved_ids: Iterable[str],
                style: CardStyle = GRID) -> List[TemplateCard]:
    saved = set(saved_ids)
    return [build_card(t, t.id in saved, style) for t in templates]
