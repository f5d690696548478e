"""
Database Infrastructure Package for College Quest

Exports database utilities and dependency providers.
"""

from college_quest.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session,
    get_session_context,
    init_db,
    close_db,
)

from college_quest.infrastructure.db.dependencies import (
    SessionDep,
    get_college_repository,
    get_school_repository,
    get_profile_repository,
    get_favorite_repository,
    get_folder_repository,
    get_allowed_email_repository,
    CollegeRepoDep,
    SchoolRepoDep,
    ProfileRepoDep,
    FavoriteRepoDep,
    FolderRepoDep,
    AllowedEmailRepoDep,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "get_db_manager",
    "get_session",
    "get_session_context",
    "init_db",
    "close_db",
    # Dependencies
    "SessionDep",
    "get_college_repository",
    "get_school_repository",
    "get_profile_repository",
    "get_favorite_repository",
    "get_folder_repository",
    "get_allowed_email_repository",
    "CollegeRepoDep",
    "SchoolRepoDep",
    "ProfileRepoDep",
    "FavoriteRepoDep",
    "FolderRepoDep",
    "AllowedEmailRepoDep",
]
