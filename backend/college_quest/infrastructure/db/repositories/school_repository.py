"""
School Repository for College Quest

Program rows belonging to colleges.
"""

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from college_quest.infrastructure.db.models.school import (
    School,
    SchoolCreate,
    SchoolUpdate,
)
from college_quest.infrastructure.db.repositories.base_repository import BaseRepository


class SchoolRepository(BaseRepository[School, SchoolCreate, SchoolUpdate]):
    """Repository for School (program) rows."""

    def __init__(self, session: AsyncSession, batch_size: Optional[int] = None):
        super().__init__(School, session, batch_size=batch_size)

    async def list_for_colleges(
        self,
        college_ids: Optional[Sequence[UUID]] = None
    ) -> List[School]:
        """All schools, or only those of the given colleges."""
        stmt = select(School).order_by(School.college_id, School.name, School.id)
        if college_ids is not None:
            stmt = stmt.where(School.college_id.in_(college_ids))
        return await self.fetch_range(stmt)

    async def distinct_categories(self) -> List[str]:
        """
        Sorted distinct program categories.

        There are tens of thousands of school rows, so this walks the
        table in capped batches.
        """
        stmt = (
            select(School.category)
            .where(School.category.is_not(None))
            .distinct()
            .order_by(School.category.asc())
        )
        categories = await self.fetch_range(stmt)
        return sorted({c for c in categories if c})
