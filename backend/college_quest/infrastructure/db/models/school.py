"""
School (academic program) SQLModel

Child rows of a College. College name/city/state are copied onto each
row so program lists render without a join.
"""

from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from college_quest.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class SchoolBase(SQLModel):
    """Shared School columns."""

    name: str = Field(..., max_length=255)
    college_id: UUID = Field(..., foreign_key="colleges.id", index=True)
    college_name: Optional[str] = Field(default=None, max_length=255)
    college_city: Optional[str] = Field(default=None, max_length=120)
    college_state: Optional[str] = Field(default=None, max_length=50)
    category: Optional[str] = Field(default=None, max_length=120, index=True)
    cip_code: Optional[str] = Field(default=None, max_length=10)
    website: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    source: str = Field(default="manual", max_length=20, description="manual or enriched")


class School(SchoolBase, UUIDMixin, TimestampMixin, table=True):
    """School database table model."""

    __tablename__ = "schools"


class SchoolCreate(SchoolBase):
    pass


class SchoolUpdate(SQLModel):
    name: Optional[str] = None
    college_id: Optional[UUID] = None
    college_name: Optional[str] = None
    college_city: Optional[str] = None
    college_state: Optional[str] = None
    category: Optional[str] = None
    cip_code: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
