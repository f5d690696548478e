"""
API Schemas

Request and response models shared by the routers. Payloads use camelCase
on the wire (``tuitionInState``, ``similarityScore``); snake_case names
are accepted on input as well.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Colleges
# =============================================================================

class CollegeRead(CamelModel):
    id: UUID
    name: str
    city: str
    state: str
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
    jesuit: bool = False
    scorecard_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SimilarCollegeRead(CollegeRead):
    similarity_score: int


class CollegeListResponse(CamelModel):
    colleges: List[CollegeRead]
    total: int
    # Page order, kept by the client for prev/next navigation
    ids: List[UUID]


class CollegeSuggestion(CamelModel):
    id: UUID
    name: str


class CollegeEdit(CamelModel):
    """Fields a signed-in user may correct on a college."""

    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None
    website: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None
    tuition_in_state: Optional[int] = Field(default=None, ge=0)
    tuition_out_of_state: Optional[int] = Field(default=None, ge=0)
    acceptance_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    enrollment: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class CollegeAdminWrite(CollegeEdit):
    """Every editable College column; also the admin create payload."""

    id: Optional[UUID] = None
    zip_code: Optional[str] = None
    category: Optional[str] = None
    net_cost: Optional[int] = Field(default=None, ge=0)
    net_pricing_guidance: Optional[str] = None
    sat_math: Optional[int] = Field(default=None, ge=200, le=800)
    sat_reading: Optional[int] = Field(default=None, ge=200, le=800)
    act_composite: Optional[int] = Field(default=None, ge=1, le=36)
    graduation_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    programs: Optional[List[str]] = None
    image_url: Optional[str] = None
    jesuit: Optional[bool] = None
    scorecard_id: Optional[str] = None


class BulkDeleteRequest(CamelModel):
    ids: List[UUID] = Field(default_factory=list)


class BulkDeleteResponse(CamelModel):
    message: str
    deleted: int


# =============================================================================
# Schools
# =============================================================================

class SchoolRead(CamelModel):
    id: UUID
    name: str
    college_id: UUID
    college_name: Optional[str] = None
    college_city: Optional[str] = None
    college_state: Optional[str] = None
    category: Optional[str] = None
    cip_code: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    source: str = "manual"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SchoolWrite(CamelModel):
    id: Optional[UUID] = None
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


# =============================================================================
# Favorites and folders
# =============================================================================

class CollegeRef(CamelModel):
    college_id: UUID


class FavoritesResponse(CamelModel):
    favorites: List[UUID]


class FavoriteStatus(CamelModel):
    is_favorite: bool


class MessageResponse(CamelModel):
    message: str


class FolderRead(CamelModel):
    id: UUID
    name: str
    color: Optional[str] = None
    position: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FolderListResponse(CamelModel):
    folders: List[FolderRead]


class FolderCreate(CamelModel):
    name: str = ""
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class FolderPatch(CamelModel):
    name: Optional[str] = None
    color: Optional[str] = None
    position: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class FolderItemsResponse(CamelModel):
    college_ids: List[UUID]


# =============================================================================
# Users
# =============================================================================

class MeResponse(CamelModel):
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "user"
    avatar_url: Optional[str] = None


class AllowedEmailRead(CamelModel):
    id: UUID
    email: str
    created_at: Optional[datetime] = None


class AllowedEmailCreate(CamelModel):
    email: str = ""
