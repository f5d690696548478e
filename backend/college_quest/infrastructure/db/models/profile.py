"""
Profile SQLModel

One row per authenticated user, keyed by the Supabase auth user id.
"""

from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from college_quest.infrastructure.db.models.base import TimestampMixin


class Profile(TimestampMixin, table=True):
    """User profile with the role flag used by the admin gate."""

    __tablename__ = "profiles"

    id: UUID = Field(..., primary_key=True, description="Supabase auth user id")
    email: Optional[str] = Field(default=None, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255)
    role: str = Field(default="user", max_length=20)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class ProfileRead(SQLModel):
    id: UUID
    email: Optional[str]
    display_name: Optional[str]
    role: str
