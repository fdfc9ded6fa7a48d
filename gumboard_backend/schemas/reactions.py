from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class ReactionToggle(BaseModel):
    emoji: str

    @field_validator("emoji")
    @classmethod
    def emoji_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Emoji is required")
        return value


class ReactionEntry(BaseModel):
    id: str
    note_id: str
    user_id: str
    user_name: Optional[str] = None
    emoji: str
    created_at: Optional[datetime] = None


class ReactionListResponse(BaseModel):
    reactions: List[ReactionEntry]
