"""
College SQLModel for College Quest

Institution-level data shown in search, detail, map and similarity views.
Acceptance and graduation rates are stored as fractions (0.0-1.0).
"""

from typing import Optional, List

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel

from college_quest.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class CollegeBase(SQLModel):
    """Shared College columns."""

    name: str = Field(..., max_length=255, index=True)

    # Location
    city: str = Field(..., max_length=120)
    state: str = Field(..., max_length=50, index=True)
    zip_code: Optional[str] = Field(default=None, max_length=20)
    region: Optional[str] = Field(default=None, max_length=50, index=True)
    website: Optional[str] = Field(default=None, max_length=500)

    # Classification
    category: Optional[str] = Field(default=None, max_length=100)
    type: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Public, Private, Community College"
    )
    size: Optional[str] = Field(
        default=None,
        max_length=20,
        description="Small, Medium, Large"
    )
    enrollment: Optional[int] = Field(default=None, ge=0)

    # Cost
    tuition_in_state: Optional[int] = Field(default=None, ge=0)
    tuition_out_of_state: Optional[int] = Field(default=None, ge=0)
    net_cost: Optional[int] = Field(default=None, ge=0)
    net_pricing_guidance: Optional[str] = None

    # Admissions
    acceptance_rate: Optional[float] = Field(
        default=None,
        ge=0.0, le=1.0,
        description="Acceptance rate as decimal (0.0-1.0)"
    )
    sat_math: Optional[int] = Field(default=None, ge=200, le=800)
    sat_reading: Optional[int] = Field(default=None, ge=200, le=800)
    act_composite: Optional[int] = Field(default=None, ge=1, le=36)

    # Outcomes
    graduation_rate: Optional[float] = Field(
        default=None,
        ge=0.0, le=1.0,
        description="Graduation rate as decimal (0.0-1.0)"
    )

    # Descriptive
    programs: Optional[List[str]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    jesuit: bool = Field(default=False)
    scorecard_id: Optional[str] = Field(default=None, max_length=20)

    # Filled once by the geocoding backfill
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class College(CollegeBase, UUIDMixin, TimestampMixin, table=True):
    """College database table model."""

    __tablename__ = "colleges"


class CollegeCreate(CollegeBase):
    """Schema for creating a college."""
    pass


class CollegeUpdate(SQLModel):
    """Partial update schema; unset fields are left untouched."""

    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    region: Optional[str] = None
    website: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None
    enrollment: Optional[int] = None
    tuition_in_state: Optional[int] = None
    tuition_out_of_state: Optional[int] = None
    net_cost: Optional[int] = None
    net_pricing_guidance: Optional[str] = None
    acceptance_rate: Optional[float] = None
    sat_math: Optional[int] = None
    sat_reading: Optional[int] = None
    act_composite: Optional[int] = None
    graduation_rate: Optional[float] = None
    programs: Optional[List[str]] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    jesuit: Optional[bool] = None
    scorecard_id: Optional[str] = None
