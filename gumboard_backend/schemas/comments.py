from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class CommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Content is required")
        return value


class CommentUpdate(CommentCreate):
    pass


class CommentAuthor(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class CommentResponse(BaseModel):
    id: str
    checklist_item_id: str
    content: str
    author: CommentAuthor
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentEnvelope(BaseModel):
    comment: CommentResponse


class CommentsListResponse(BaseModel):
    comments: List[CommentResponse]
