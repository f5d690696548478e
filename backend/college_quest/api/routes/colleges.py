"""
College API Routes

Filtered listing, detail, similar colleges, autocomplete and the value
lists behind the filter dropdowns.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query

from college_quest.api.dependencies import CollegeRepoDep, CurrentUserIdDep
from college_quest.api.schemas import (
    CollegeEdit,
    CollegeListResponse,
    CollegeRead,
    CollegeSuggestion,
    SimilarCollegeRead,
)
from college_quest.config.settings import settings
from college_quest.domain.college_filters import (
    ACCEPTANCE_BUCKETS,
    CollegeFilters,
    SortField,
    SortOrder,
)
from college_quest.domain.similarity import SimilarityScorer
from college_quest.infrastructure.db.models.college import College, CollegeUpdate
from college_quest.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/colleges", tags=["colleges"])

scorer = SimilarityScorer()

AUTOCOMPLETE_MIN_CHARS = 2
AUTOCOMPLETE_LIMIT = 10


def college_not_found(college_id: UUID) -> NotFoundError:
    return NotFoundError(
        f"College {college_id} not found",
        operation="select",
        table="colleges",
    )


# =============================================================================
# Listing
# =============================================================================

@router.get("", response_model=CollegeListResponse)
async def list_colleges(
    repo: CollegeRepoDep,
    query: Optional[str] = Query(None, description="Free-text search"),
    states: Optional[str] = Query(None, description="Comma-separated states"),
    regions: Optional[str] = Query(None),
    types: Optional[str] = Query(None),
    sizes: Optional[str] = Query(None),
    program_categories: Optional[str] = Query(None, alias="programCategories"),
    jesuit_only: bool = Query(False, alias="jesuitOnly"),
    tuition_min: Optional[int] = Query(None, alias="tuitionMin", ge=0),
    tuition_max: Optional[int] = Query(None, alias="tuitionMax", ge=0),
    enrollment_min: Optional[int] = Query(None, alias="enrollmentMin", ge=0),
    enrollment_max: Optional[int] = Query(None, alias="enrollmentMax", ge=0),
    acceptance_rate_min: Optional[float] = Query(None, alias="acceptanceRateMin", ge=0, le=100),
    acceptance_rate_max: Optional[float] = Query(None, alias="acceptanceRateMax", ge=0, le=100),
    acceptance_ranges: Optional[str] = Query(
        None,
        alias="acceptanceRanges",
        description="Comma-separated bucket labels; overrides the min/max range",
    ),
    favorite_ids: Optional[str] = Query(None, alias="favoriteIds"),
    favorites_only: bool = Query(False, alias="favoritesOnly"),
    sort_by: SortField = Query(SortField.NAME, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(
        settings.default_listing_limit,
        ge=1,
        le=settings.max_listing_limit,
    ),
):
    """
    Search colleges.

    Acceptance rates are given in percent (acceptanceRateMin=15).
    sortBy=relevance puts favoriteIds first and falls back to name when no
    favorites are given.
    """
    filters = CollegeFilters.from_params(
        query=query,
        states=states,
        regions=regions,
        types=types,
        sizes=sizes,
        program_categories=program_categories,
        jesuit_only=jesuit_only,
        tuition_min=tuition_min,
        tuition_max=tuition_max,
        enrollment_min=enrollment_min,
        enrollment_max=enrollment_max,
        acceptance_rate_min=acceptance_rate_min,
        acceptance_rate_max=acceptance_rate_max,
        acceptance_ranges=acceptance_ranges,
        favorite_ids=favorite_ids,
        favorites_only=favorites_only,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )

    result = await repo.search(filters)
    return CollegeListResponse(colleges=result.items, total=result.total, ids=result.ids)


# =============================================================================
# Lookups (declared before /{college_id})
# =============================================================================

@router.get("/autocomplete", response_model=List[CollegeSuggestion])
async def autocomplete(
    repo: CollegeRepoDep,
    query: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
):
    term = (query or q or "").strip()
    if len(term) < AUTOCOMPLETE_MIN_CHARS:
        return []
    return await repo.autocomplete(term, AUTOCOMPLETE_LIMIT)


@router.get("/filters/states", response_model=List[str])
async def filter_states(repo: CollegeRepoDep):
    return await repo.distinct_values("state")


@router.get("/filters/regions", response_model=List[str])
async def filter_regions(repo: CollegeRepoDep):
    return await repo.distinct_values("region")


@router.get("/filters/types", response_model=List[str])
async def filter_types(repo: CollegeRepoDep):
    return await repo.distinct_values("type")


@router.get("/filters/acceptance-ranges", response_model=List[str])
async def filter_acceptance_ranges():
    return [bucket.label for bucket in ACCEPTANCE_BUCKETS]


# =============================================================================
# Single college
# =============================================================================

@router.get("/{college_id}", response_model=CollegeRead)
async def get_college(college_id: UUID, repo: CollegeRepoDep):
    college = await repo.get_by_id(college_id)
    if not college:
        raise college_not_found(college_id)
    return college


@router.post("/{college_id}", response_model=CollegeRead)
async def update_college(
    college_id: UUID,
    body: CollegeEdit,
    repo: CollegeRepoDep,
    user_id: CurrentUserIdDep,
):
    """Correct a college's basic facts. Only fields present in the body change."""
    changes = CollegeUpdate(**body.model_dump(exclude_unset=True))
    college = await repo.update(college_id, changes)
    if not college:
        raise college_not_found(college_id)
    logger.info(f"College {college_id} updated by {user_id}")
    return college


@router.get("/{college_id}/similar", response_model=List[SimilarCollegeRead])
async def similar_colleges(
    college_id: UUID,
    repo: CollegeRepoDep,
    limit: int = Query(settings.similar_default_results),
):
    """Colleges most like this one, each with its similarityScore."""
    limit = max(1, min(limit, settings.similar_max_results))

    target: Optional[College] = await repo.get_by_id(college_id)
    if not target:
        raise college_not_found(college_id)

    candidates = await repo.get_similarity_candidates(
        college_id, settings.similar_candidate_pool
    )
    ranked = scorer.rank(target, candidates, limit)

    return [
        SimilarCollegeRead(
            **CollegeRead.model_validate(item.college).model_dump(),
            similarity_score=item.score,
        )
        for item in ranked
    ]
