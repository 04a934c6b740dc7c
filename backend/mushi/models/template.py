# mushi/models/template.py
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

INDUSTRIES = ("FOOD", "DRINK", "FASHION", "BEAUTY", "HEALTH")
FORMATS = ("Feed", "Story")
LANGUAGES = ("LT", "EN")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Template(BaseModel):
    id: str
    title: str
    canvaUrl: str
    category: str
    format: Literal["Feed", "Story"]
    imageUrl: Optional[str] = None
    language: str
    popularity: int = 0
    savedCount: int = Field(0, ge=0)
    createdAt: datetime = Field(default_factory=_utcnow)

    @field_validator("savedCount", "popularity", mode="before")
    @classmethod
    def _none_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("createdAt")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Mongo hands back naive datetimes; they are stored as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Template":
        data = dict(row)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls(**data)

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump(exclude={"id"})
        row["_id"] = self.id
        return row
