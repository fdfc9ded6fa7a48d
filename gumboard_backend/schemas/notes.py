from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional

from schemas.items import ItemResponse


class NoteCreate(BaseModel):
    color: Optional[str] = None


class NoteUpdate(BaseModel):
    color: Optional[str] = None
    done: Optional[bool] = None
    archived: Optional[bool] = None


class NoteAuthor(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class NoteBoard(BaseModel):
    id: str
    name: str


class NoteResponse(BaseModel):
    id: str
    board_id: str
    created_by: str
    color: str
    done: bool
    archived_at: Optional[datetime] = None
    version: int
    user: Optional[NoteAuthor] = None
    board: Optional[NoteBoard] = None
    checklist_items: List[ItemResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NoteEnvelope(BaseModel):
    note: NoteResponse


class NoteListResponse(BaseModel):
    notes: List[NoteResponse]


def _require_ids(ids: List[str]) -> List[str]:
    if not ids:
        raise ValueError("At least one note id is required")
    for note_id in ids:
        if not note_id:
            raise ValueError("Note ids must be non-empty strings")
    return ids


class BulkIdsRequest(BaseModel):
    ids: List[str]

    @field_validator("ids")
    @classmethod
    def ids_required(cls, value: List[str]) -> List[str]:
        return _require_ids(value)


class BulkArchiveRequest(BulkIdsRequest):
    model_config = ConfigDict(populate_by_name=True)

    archived_at: Optional[datetime] = Field(default=None, alias="archivedAt")


class BulkDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_ids: List[str] = Field(alias="noteIds")

    @field_validator("note_ids")
    @classmethod
    def ids_required(cls, value: List[str]) -> List[str]:
        return _require_ids(value)
