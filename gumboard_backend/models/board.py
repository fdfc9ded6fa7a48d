from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from gumboard.database import Base
from models.common import new_id, utcnow


class Board(Base):
    __tablename__ = "boards"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    organization_id = Column(String, ForeignKey("organizations.id"), index=True, nullable=False)
    created_by = Column(String, ForeignKey("users.id"), index=True, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    send_slack_updates = Column(Boolean, nullable=False, default=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
