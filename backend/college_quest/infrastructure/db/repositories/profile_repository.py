"""
Profile Repository for College Quest
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.models.profile import Profile
from college_quest.infrastructure.db.repositories.base_repository import add_in_savepoint
from college_quest.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)


class ProfileRepository:
    """Repository for user profiles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> Optional[Profile]:
        return await self.session.get(Profile, user_id)

    async def ensure(
        self,
        user_id: UUID,
        email: Optional[str] = None,
        display_name: Optional[str] = None
    ) -> Profile:
        """
        Create the profile on first use.

        An existing profile is returned untouched, so a role granted by an
        admin is never reset. When a concurrent request inserts the same
        profile first, that row is returned instead.
        """
        existing = await self.get(user_id)
        if existing:
            return existing

        profile = Profile(
            id=user_id,
            email=email,
            display_name=display_name,
            role="user",
        )
        if await add_in_savepoint(self.session, profile):
            return profile

        existing = await self.get(user_id)
        if existing is None:
            raise DatabaseError(
                "Failed to create profile",
                operation="insert",
                table="profiles",
            )
        logger.info(f"Profile {user_id} created concurrently")
        return existing
