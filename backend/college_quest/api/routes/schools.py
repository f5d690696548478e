"""
School (program) API Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from college_quest.api.dependencies import SchoolRepoDep
from college_quest.api.schemas import SchoolRead
from college_quest.domain.college_filters import split_csv
from college_quest.infrastructure.db.repositories.college_repository import parse_uuid_list


router = APIRouter(prefix="/api/schools", tags=["schools"])


@router.get("/categories", response_model=List[str])
async def list_categories(repo: SchoolRepoDep):
    """Every program category, sorted."""
    return await repo.distinct_categories()


@router.get("/programs", response_model=List[SchoolRead])
async def list_programs(
    repo: SchoolRepoDep,
    college_ids: Optional[str] = Query(
        None,
        alias="collegeIds",
        description="Comma-separated college ids; all programs when omitted",
    ),
):
    ids = None
    if college_ids is not None:
        ids = parse_uuid_list(split_csv(college_ids), "collegeIds")
    return await repo.list_for_colleges(ids)
