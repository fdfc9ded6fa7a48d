from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from gumboard.database import Base
from models.common import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)  # legacy org-wide flag
    organization_id = Column(String, ForeignKey("organizations.id"), index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown User"
