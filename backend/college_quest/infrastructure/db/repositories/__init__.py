"""
Repository Layer for College Quest

Exports all repository classes for dependency injection.
"""

from college_quest.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
    IWriteRepository,
)
from college_quest.infrastructure.db.repositories.college_repository import (
    CollegeRepository,
)
from college_quest.infrastructure.db.repositories.school_repository import (
    SchoolRepository,
)
from college_quest.infrastructure.db.repositories.profile_repository import (
    ProfileRepository,
)
from college_quest.infrastructure.db.repositories.favorite_repository import (
    FavoriteRepository,
)
from college_quest.infrastructure.db.repositories.folder_repository import (
    FolderRepository,
)
from college_quest.infrastructure.db.repositories.allowed_email_repository import (
    AllowedEmailRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    "IWriteRepository",
    # Repositories
    "CollegeRepository",
    "SchoolRepository",
    "ProfileRepository",
    "FavoriteRepository",
    "FolderRepository",
    "AllowedEmailRepository",
]
