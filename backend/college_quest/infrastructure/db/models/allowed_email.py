"""
Allowed Email SQLModel

Sign-in allow list checked after the OAuth code exchange.
"""

from datetime import datetime

from sqlmodel import Field

from college_quest.infrastructure.db.models.base import UUIDMixin, utcnow


class AllowedEmail(UUIDMixin, table=True):
    __tablename__ = "allowed_emails"

    email: str = Field(..., max_length=255, unique=True, description="Stored lowercase")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
