"""
Favorites Repository for College Quest

Favorites are idempotent: adding a college that is already a favorite is
reported as "not created" rather than as an error, including when two
requests race and the unique constraint rejects the second insert.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, and_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.models.favorite import Favorite
from college_quest.infrastructure.db.repositories.base_repository import add_in_savepoint
from college_quest.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)


class FavoriteRepository:
    """Repository for a user's favorite colleges."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_college_ids(self, user_id: UUID) -> List[UUID]:
        """Favorite college ids, newest first."""
        stmt = (
            select(Favorite.college_id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, user_id: UUID, college_id: UUID) -> bool:
        stmt = select(Favorite.id).where(and_(
            Favorite.user_id == user_id,
            Favorite.college_id == college_id,
        ))
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add(self, user_id: UUID, college_id: UUID) -> bool:
        """
        Add a favorite.

        Returns:
            True if a row was created, False if it already existed
        """
        if await self.exists(user_id, college_id):
            return False

        if await add_in_savepoint(self.session, Favorite(user_id=user_id, college_id=college_id)):
            return True

        if await self.exists(user_id, college_id):
            logger.info(f"Favorite {college_id} for {user_id} added concurrently")
            return False
        raise DatabaseError(
            "Failed to add favorite",
            operation="insert",
            table="favorites",
        )

    async def remove(self, user_id: UUID, college_id: UUID) -> bool:
        stmt = delete(Favorite).where(and_(
            Favorite.user_id == user_id,
            Favorite.college_id == college_id,
        ))
        result = await self.session.execute(stmt)
        return result.rowcount > 0
