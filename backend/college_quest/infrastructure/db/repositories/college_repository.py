"""
College Repository for College Quest

Turns CollegeFilters into SQL and executes the listing, plus the smaller
read paths used by detail, autocomplete, filter dropdowns, similar
colleges and the admin table.
"""

import logging
from typing import List, Optional, Sequence, Set
from uuid import UUID

from sqlalchemy import select, and_, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from college_quest.config.settings import settings
from college_quest.domain.college_filters import (
    AcceptanceBucket,
    CollegeFilters,
    ListingPage,
    TEXT_SEARCH_COLUMNS,
    partition_favorites_first,
)
from college_quest.infrastructure.db.models.college import (
    College,
    CollegeCreate,
    CollegeUpdate,
)
from college_quest.infrastructure.db.models.school import School
from college_quest.infrastructure.db.repositories.base_repository import BaseRepository
from college_quest.infrastructure.exceptions import ValidationError


logger = logging.getLogger(__name__)

# Sort keys offered by the admin table
ADMIN_SORT_COLUMNS = {
    "name": "name",
    "tuition": "tuition_in_state",
    "enrollment": "enrollment",
    "acceptance": "acceptance_rate",
    "location": "state",
}

FILTER_VALUE_COLUMNS = ("state", "region", "type")


def parse_uuid_list(values: Sequence[str], field: str) -> List[UUID]:
    try:
        return [UUID(value) for value in values]
    except ValueError as e:
        raise ValidationError(
            f"{field} must contain valid ids",
            details={"field": field},
            original_error=e,
        ) from e


def text_search_condition(query: str, columns: Sequence[str] = TEXT_SEARCH_COLUMNS):
    """Case-insensitive substring match on any of the columns."""
    return or_(*(
        getattr(College, column).icontains(query, autoescape=True)
        for column in columns
    ))


def acceptance_bucket_condition(bucket: AcceptanceBucket):
    column = College.acceptance_rate
    lower = column >= bucket.lower if bucket.lower_inclusive else column > bucket.lower
    if bucket.upper is None:
        return lower
    return and_(lower, column <= bucket.upper)


def build_filter_conditions(
    filters: CollegeFilters,
    program_college_ids: Optional[Set[UUID]] = None
) -> list:
    """
    WHERE clauses for a listing, ANDed together by the caller.

    Acceptance buckets and the continuous acceptance range are mutually
    exclusive: when any bucket is selected the range is ignored.
    """
    conditions = []

    if filters.query:
        conditions.append(text_search_condition(filters.query))

    if filters.states:
        conditions.append(College.state.in_(filters.states))
    if filters.regions:
        conditions.append(College.region.in_(filters.regions))
    if filters.types:
        conditions.append(College.type.in_(filters.types))
    if filters.sizes:
        conditions.append(College.size.in_(filters.sizes))
    if filters.jesuit_only:
        conditions.append(College.jesuit.is_(True))

    if program_college_ids is not None:
        conditions.append(College.id.in_(program_college_ids))
    if filters.favorites_only:
        conditions.append(College.id.in_(parse_uuid_list(filters.favorite_ids, "favoriteIds")))

    if filters.acceptance_ranges:
        conditions.append(or_(*(
            acceptance_bucket_condition(bucket) for bucket in filters.acceptance_ranges
        )))
    else:
        if filters.acceptance_rate_min is not None:
            conditions.append(College.acceptance_rate >= filters.acceptance_rate_min)
        if filters.acceptance_rate_max is not None:
            conditions.append(College.acceptance_rate <= filters.acceptance_rate_max)

    if filters.tuition_min is not None:
        conditions.append(College.tuition_in_state >= filters.tuition_min)
    if filters.tuition_max is not None:
        conditions.append(College.tuition_in_state <= filters.tuition_max)
    if filters.enrollment_min is not None:
        conditions.append(College.enrollment >= filters.enrollment_min)
    if filters.enrollment_max is not None:
        conditions.append(College.enrollment <= filters.enrollment_max)

    return conditions


def order_clauses(column_name: str, ascending: bool) -> list:
    """Requested column, then id so pages never overlap on ties."""
    column = getattr(College, column_name)
    return [
        column.asc() if ascending else column.desc(),
        College.id.asc(),
    ]


class CollegeRepository(BaseRepository[College, CollegeCreate, CollegeUpdate]):
    """Repository for College rows."""

    def __init__(self, session: AsyncSession, batch_size: Optional[int] = None):
        super().__init__(College, session, batch_size=batch_size)

    # =========================================================================
    # Filtered listing
    # =========================================================================

    async def resolve_program_college_ids(self, categories: Sequence[str]) -> Set[UUID]:
        """Distinct college ids having at least one School in the categories."""
        stmt = (
            select(School.college_id)
            .where(School.category.in_(categories))
            .distinct()
            .order_by(School.college_id)
        )
        return set(await self.fetch_range(stmt))

    def build_listing_statement(
        self,
        filters: CollegeFilters,
        program_college_ids: Optional[Set[UUID]] = None
    ) -> Select:
        stmt = select(College)
        conditions = build_filter_conditions(filters, program_college_ids)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        return stmt

    async def search(self, filters: CollegeFilters) -> ListingPage:
        """
        Run a filtered, sorted, paginated listing.

        Returns:
            ListingPage with the page's rows and the total match count
        """
        program_college_ids = None
        if filters.program_categories:
            program_college_ids = await self.resolve_program_college_ids(
                filters.program_categories
            )
            if not program_college_ids:
                return ListingPage(items=[], total=0)

        if filters.favorites_only and not filters.favorite_ids:
            return ListingPage(items=[], total=0)

        stmt = self.build_listing_statement(filters, program_college_ids)

        if filters.uses_relevance_sort:
            return await self._search_by_relevance(stmt, filters)

        stmt = stmt.order_by(*order_clauses(filters.sort_column, filters.ascending))
        total = await self.count_matching(stmt)
        items = await self.fetch_range(stmt, filters.offset, filters.limit)
        return ListingPage(items=items, total=total)

    async def _search_by_relevance(
        self,
        stmt: Select,
        filters: CollegeFilters
    ) -> ListingPage:
        """
        Favorites first, then everything else, paged in memory.

        Needs the whole filtered set before the first page can be cut, so
        the read is capped at RELEVANCE_MAX_ROWS.
        """
        stmt = stmt.order_by(*order_clauses("name", True))
        total = await self.count_matching(stmt)
        cap = settings.relevance_max_rows
        rows = await self.fetch_range(stmt, 0, cap)
        if total > len(rows):
            logger.warning(
                f"Relevance sort truncated to {len(rows)} of {total} matching colleges"
            )

        ordered = partition_favorites_first(rows, filters.favorite_ids)
        start = filters.offset
        return ListingPage(items=ordered[start:start + filters.limit], total=total)

    # =========================================================================
    # Similar colleges
    # =========================================================================

    async def get_similarity_candidates(
        self,
        exclude_id: UUID,
        pool_size: int
    ) -> List[College]:
        """Candidate pool for similarity ranking, ordered by id."""
        stmt = (
            select(College)
            .where(College.id != exclude_id)
            .order_by(College.id.asc())
        )
        return await self.fetch_range(stmt, 0, pool_size)

    # =========================================================================
    # Lookups
    # =========================================================================

    async def autocomplete(self, term: str, limit: int = 10) -> List[College]:
        """Colleges whose name contains the term (case-insensitive)."""
        stmt = (
            select(College)
            .where(College.name.icontains(term, autoescape=True))
            .order_by(College.name.asc(), College.id.asc())
            .limit(limit)
        )
        result = await self._execute(stmt, "select")
        return list(result.scalars().all())

    async def distinct_values(self, column_name: str) -> List[str]:
        """Sorted distinct non-null values of a filterable column."""
        if column_name not in FILTER_VALUE_COLUMNS:
            raise ValidationError(f"Unsupported filter column: {column_name}")
        column = getattr(College, column_name)
        stmt = (
            select(column)
            .where(column.is_not(None), column != "")
            .distinct()
            .order_by(column.asc())
        )
        return await self.fetch_range(stmt)

    # =========================================================================
    # Admin
    # =========================================================================

    async def admin_search(
        self,
        query: str = "",
        sort_by: str = "name",
        ascending: bool = True,
        page: int = 1,
        limit: int = 20
    ) -> ListingPage:
        """Admin table: name/city/state search with a fixed set of sorts."""
        stmt = select(College)
        if query:
            stmt = stmt.where(text_search_condition(query, ("name", "city", "state")))
        column_name = ADMIN_SORT_COLUMNS.get(sort_by, "name")
        stmt = stmt.order_by(*order_clauses(column_name, ascending))

        total = await self.count_matching(stmt)
        items = await self.fetch_range(stmt, (page - 1) * limit, limit)
        return ListingPage(items=items, total=total)

    async def delete_many(self, ids: Sequence[UUID]) -> int:
        """Bulk delete; returns the number of rows removed."""
        stmt = delete(College).where(College.id.in_(ids))
        result = await self._execute(stmt, "delete")
        return result.rowcount or 0
