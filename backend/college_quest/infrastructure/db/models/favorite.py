"""
Favorites and Favorite Folders Models

SQLModels for:
- Favorite: a college bookmarked by a user
- FavoriteFolder: user-named container of colleges
- FavoriteFolderItem: a college inside a folder

Uniqueness is enforced by the database so concurrent duplicate inserts
resolve to a single row.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from college_quest.infrastructure.db.models.base import TimestampMixin, UUIDMixin, utcnow


class Favorite(UUIDMixin, table=True):
    """College bookmarked by a user."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "college_id", name="uq_favorites_user_college"),
    )

    user_id: UUID = Field(..., foreign_key="profiles.id", index=True)
    college_id: UUID = Field(..., foreign_key="colleges.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# =============================================================================
# Folders
# =============================================================================

class FavoriteFolderBase(SQLModel):
    name: str = Field(..., max_length=100)
    color: Optional[str] = Field(default=None, max_length=20)
    position: int = Field(default=0)


class FavoriteFolder(FavoriteFolderBase, UUIDMixin, TimestampMixin, table=True):
    """Named folder owned by a user."""

    __tablename__ = "favorite_folders"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_favorite_folders_user_name"),
    )

    user_id: UUID = Field(..., foreign_key="profiles.id", index=True)


class FavoriteFolderUpdate(SQLModel):
    name: Optional[str] = None
    color: Optional[str] = None
    position: Optional[int] = None


class FavoriteFolderItem(UUIDMixin, table=True):
    """College placed in a folder."""

    __tablename__ = "favorite_folder_items"
    __table_args__ = (
        UniqueConstraint("folder_id", "college_id", name="uq_favorite_folder_items_folder_college"),
    )

    folder_id: UUID = Field(..., foreign_key="favorite_folders.id", index=True)
    college_id: UUID = Field(..., foreign_key="colleges.id")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
