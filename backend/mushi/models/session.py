# mushi/models/session.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None
    expires_at: Optional[datetime] = None
