from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from gumboard.database import Base
from models.common import new_id, utcnow


class Reaction(Base):
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint('note_id', 'user_id', 'emoji', name='uq_note_user_emoji'),
    )

    id = Column(String, primary_key=True, default=new_id)
    note_id = Column(String, ForeignKey("notes.id"), index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    emoji = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
