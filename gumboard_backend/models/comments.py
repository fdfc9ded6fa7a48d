from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from gumboard.database import Base
from models.common import new_id, utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=new_id)
    checklist_item_id = Column(String, ForeignKey("checklist_items.id"), index=True, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
