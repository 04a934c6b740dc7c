# mushi/schemas/template.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


# ------------------------
# Card shown in the gallery grid
# ------------------------
class TemplateCard(BaseModel):
    id: str
    title: str
    description: str          # category label
    imageUrl: str
    canvaUrl: Optional[str] = None
    price: int = 0
    author: str               # language code
    isSaved: bool = False
    savedCount: int = 0
    variant: str = "grid"


class TemplateListResponse(BaseModel):
    items: List[TemplateCard]
    total: int
    hasMore: bool


class FilterOptionsResponse(BaseModel):
    industries: List[str]
    formats: List[str]
    languages: List[str]
    sortKeys: List[str]


class SavedTemplatesResponse(BaseModel):
    savedTemplates: List[str]


class ToggleSaveResponse(BaseModel):
    templateId: str
    saved: bool
    savedCount: int


class SeedResponse(BaseModel):
    message: str
    count: int
    templates: List[Dict[str, Any]]
