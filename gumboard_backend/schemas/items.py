from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator


class ItemCreate(BaseModel):
    content: str
    checked: bool = False

    @field_validator("content")
    @classmethod
    def content_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Content is required")
        return value


class ItemUpdate(BaseModel):
    content: Optional[str] = None
    checked: Optional[bool] = None
    version: Optional[int] = None

    @field_validator("content")
    @classmethod
    def trim_content(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def has_changes(self):
        if self.content is None and self.checked is None:
            raise ValueError("At least one field must be provided for update")
        return self


class ReorderEntry(BaseModel):
    id: str
    order: int


class ReorderRequest(BaseModel):
    items: List[ReorderEntry]
    version: Optional[int] = None


class ItemResponse(BaseModel):
    id: str
    note_id: str
    content: str
    checked: bool
    order: int
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemEnvelope(BaseModel):
    item: ItemResponse


class ItemListResponse(BaseModel):
    items: List[ItemResponse]
    version: int
