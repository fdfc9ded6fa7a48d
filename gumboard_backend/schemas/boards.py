from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class BoardCreate(BaseModel):
    name: str
    description: Optional[str] = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Board name is required")
        return value


class BoardUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None
    send_slack_updates: Optional[bool] = None
    archived: Optional[bool] = None


class BoardResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    organization_id: str
    is_public: bool
    send_slack_updates: bool
    archived_at: Optional[datetime] = None
    note_count: int = 0
    last_activity_at: Optional[datetime] = None


class BoardEnvelope(BaseModel):
    board: BoardResponse


class BoardListResponse(BaseModel):
    boards: List[BoardResponse]
