
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from gumboard.database import Base
from models.common import new_id, utcnow


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    # Slack bot install (OAuth handled elsewhere)
    slack_bot_token = Column(Text, nullable=True)
    slack_channel_id = Column(String, nullable=True)
    slack_webhook_url = Column(Text, nullable=True)  # legacy incoming webhook
    # billing, synced by the Stripe webhook service
    stripe_customer_id = Column(String, nullable=True)
    plan = Column(String, nullable=False, default="FREE")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class OrganizationMember(Base):
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_member'),
    )

    ROLE_ADMIN = "ADMIN"
    ROLE_MEMBER = "MEMBER"

    id = Column(String, primary_key=True, default=new_id)
    organization_id = Column(String, ForeignKey("organizations.id"), index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    role = Column(String, nullable=False, default=ROLE_MEMBER)  # ADMIN|MEMBER
    joined_at = Column(DateTime(timezone=True), default=utcnow)
