# mushi/models/user.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator


class UserRecord(BaseModel):
    id: str
    savedTemplates: List[str] = []

    # Set by the account page avatar upload
    avatar_url: Optional[str] = None
    avatar_file: Optional[str] = None

    @field_validator("savedTemplates", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserRecord":
        data = dict(row)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls(**data)
