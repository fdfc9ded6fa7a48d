from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from gumboard.database import Base
from models.common import new_id, utcnow


class Note(Base):
    __tablename__ = "notes"

    id = Column(String, primary_key=True, default=new_id)
    board_id = Column(String, ForeignKey("boards.id"), index=True, nullable=False)
    created_by = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    color = Column(String, nullable=False, default="#fef3c7")
    done = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)  # bumped on every checklist change
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ChecklistItem(Base):
    __tablename__ = "checklist_items"

    id = Column(String, primary_key=True, default=new_id)
    note_id = Column(String, ForeignKey("notes.id"), index=True, nullable=False)
    content = Column(Text, nullable=False, default="")
    checked = Column(Boolean, nullable=False, default=False)
    order = Column("order", Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
