from sqlalchemy import Column, Integer, String, DateTime, Text
from gumboard.database import Base
from models.common import utcnow


class OperationLog(Base):
    __tablename__ = "operation_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=True)
    action = Column(String, index=True, nullable=False)
    organization_id = Column(String, index=True, nullable=True)
    board_id = Column(String, index=True, nullable=True)
    detail = Column(Text, nullable=True)
    ip = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
