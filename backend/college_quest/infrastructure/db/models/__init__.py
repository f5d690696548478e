"""
SQLModel ORM Models for College Quest

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from college_quest.infrastructure.db.models.base import (
    TimestampMixin,
    UUIDMixin,
)
from college_quest.infrastructure.db.models.college import (
    College,
    CollegeBase,
    CollegeCreate,
    CollegeUpdate,
)
from college_quest.infrastructure.db.models.school import (
    School,
    SchoolBase,
    SchoolCreate,
    SchoolUpdate,
)
from college_quest.infrastructure.db.models.profile import Profile, ProfileRead
from college_quest.infrastructure.db.models.favorite import (
    Favorite,
    FavoriteFolder,
    FavoriteFolderBase,
    FavoriteFolderUpdate,
    FavoriteFolderItem,
)
from college_quest.infrastructure.db.models.allowed_email import AllowedEmail


__all__ = [
    # Base
    "TimestampMixin",
    "UUIDMixin",
    # College
    "College",
    "CollegeBase",
    "CollegeCreate",
    "CollegeUpdate",
    # School
    "School",
    "SchoolBase",
    "SchoolCreate",
    "SchoolUpdate",
    # Users
    "Profile",
    "ProfileRead",
    "AllowedEmail",
    # Favorites
    "Favorite",
    "FavoriteFolder",
    "FavoriteFolderBase",
    "FavoriteFolderUpdate",
    "FavoriteFolderItem",
]
