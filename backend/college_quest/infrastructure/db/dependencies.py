"""
Dependency Injection Providers for College Quest

FastAPI dependencies for database sessions and repositories.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.database import get_session
from college_quest.infrastructure.db.repositories import (
    CollegeRepository,
    SchoolRepository,
    ProfileRepository,
    FavoriteRepository,
    FolderRepository,
    AllowedEmailRepository,
)


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_college_repository(
    session: SessionDep,
) -> AsyncGenerator[CollegeRepository, None]:
    """
    Dependency provider for CollegeRepository.

    Usage:
        @router.get("/colleges")
        async def list_colleges(repo: CollegeRepoDep):
            ...
    """
    yield CollegeRepository(session)


async def get_school_repository(
    session: SessionDep,
) -> AsyncGenerator[SchoolRepository, None]:
    yield SchoolRepository(session)


async def get_profile_repository(
    session: SessionDep,
) -> AsyncGenerator[ProfileRepository, None]:
    yield ProfileRepository(session)


async def get_favorite_repository(
    session: SessionDep,
) -> AsyncGenerator[FavoriteRepository, None]:
    yield FavoriteRepository(session)


async def get_folder_repository(
    session: SessionDep,
) -> AsyncGenerator[FolderRepository, None]:
    yield FolderRepository(session)


async def get_allowed_email_repository(
    session: SessionDep,
) -> AsyncGenerator[AllowedEmailRepository, None]:
    yield AllowedEmailRepository(session)


# Type aliases for repository dependencies
CollegeRepoDep = Annotated[
    CollegeRepository,
    Depends(get_college_repository)
]
SchoolRepoDep = Annotated[
    SchoolRepository,
    Depends(get_school_repository)
]
ProfileRepoDep = Annotated[
    ProfileRepository,
    Depends(get_profile_repository)
]
FavoriteRepoDep = Annotated[
    FavoriteRepository,
    Depends(get_favorite_repository)
]
FolderRepoDep = Annotated[
    FolderRepository,
    Depends(get_folder_repository)
]
AllowedEmailRepoDep = Annotated[
    AllowedEmailRepository,
    Depends(get_allowed_email_repository)
]
