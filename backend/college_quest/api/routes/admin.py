"""
Admin Routes for Data Maintenance

College, school and allowed-email management. Protected by verify_admin:
either the admin password as bearer token or a user token with the admin
role.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from college_quest.api.dependencies import (
    AllowedEmailRepoDep,
    CollegeRepoDep,
    SchoolRepoDep,
    verify_admin,
)
from college_quest.api.schemas import (
    AllowedEmailCreate,
    AllowedEmailRead,
    BulkDeleteRequest,
    BulkDeleteResponse,
    CollegeAdminWrite,
    CollegeListResponse,
    CollegeRead,
    MessageResponse,
    SchoolRead,
    SchoolWrite,
)
from college_quest.domain.college_filters import SortOrder
from college_quest.infrastructure.db.models.college import CollegeCreate, CollegeUpdate
from college_quest.infrastructure.db.models.school import SchoolCreate, SchoolUpdate
from college_quest.infrastructure.exceptions import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin)]  # Protect ALL admin routes
)


def not_found(table: str, record_id: UUID) -> NotFoundError:
    return NotFoundError(f"{record_id} not found", operation="select", table=table)


@router.api_route("/auth", methods=["GET", "POST"])
async def check_admin_auth():
    """Lets the admin UI test a credential."""
    return {"authenticated": True}


# =============================================================================
# Colleges
# =============================================================================

@router.get("/colleges", response_model=CollegeListResponse)
async def list_colleges(
    repo: CollegeRepoDep,
    query: str = Query(""),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=1000),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
):
    result = await repo.admin_search(
        query=query.strip(),
        sort_by=sort_by,
        ascending=sort_order == SortOrder.ASC,
        page=page,
        limit=limit,
    )
    return CollegeListResponse(colleges=result.items, total=result.total, ids=result.ids)


@router.post("/colleges", response_model=CollegeRead, status_code=status.HTTP_201_CREATED)
async def create_college(body: CollegeAdminWrite, repo: CollegeRepoDep):
    if not body.name or not body.city or not body.state:
        raise ValidationError("name, city, and state are required")

    data = CollegeCreate(**body.model_dump(exclude_none=True, exclude={"id"}))
    college = await repo.create(data, id=body.id)
    logger.info(f"[ADMIN] Created college {college.id} ({college.name})")
    return college


@router.delete("/colleges", response_model=BulkDeleteResponse)
async def delete_colleges(body: BulkDeleteRequest, repo: CollegeRepoDep):
    if not body.ids:
        raise ValidationError("ids must be a non-empty list")

    deleted = await repo.delete_many(body.ids)
    logger.info(f"[ADMIN] Deleted {deleted} colleges")
    return BulkDeleteResponse(message=f"Deleted {deleted} colleges", deleted=deleted)


@router.get("/colleges/{college_id}", response_model=CollegeRead)
async def get_college(college_id: UUID, repo: CollegeRepoDep):
    college = await repo.get_by_id(college_id)
    if not college:
        raise not_found("colleges", college_id)
    return college


@router.post("/colleges/{college_id}", response_model=CollegeRead)
async def update_college(college_id: UUID, body: CollegeAdminWrite, repo: CollegeRepoDep):
    changes = CollegeUpdate(**body.model_dump(exclude_unset=True, exclude={"id"}))
    college = await repo.update(college_id, changes)
    if not college:
        raise not_found("colleges", college_id)
    return college


@router.delete("/colleges/{college_id}", response_model=MessageResponse)
async def delete_college(college_id: UUID, repo: CollegeRepoDep):
    if not await repo.delete(college_id):
        raise not_found("colleges", college_id)
    logger.info(f"[ADMIN] Deleted college {college_id}")
    return MessageResponse(message="College deleted")


# =============================================================================
# Schools
# =============================================================================

@router.get("/schools", response_model=List[SchoolRead])
async def list_schools(repo: SchoolRepoDep):
    return await repo.list_for_colleges()


@router.post("/schools", response_model=SchoolRead, status_code=status.HTTP_201_CREATED)
async def create_school(body: SchoolWrite, repo: SchoolRepoDep):
    if not body.name or not body.college_id:
        raise ValidationError("name and collegeId are required")

    data = SchoolCreate(**body.model_dump(exclude_none=True, exclude={"id"}))
    school = await repo.create(data, id=body.id)
    logger.info(f"[ADMIN] Created school {school.id} for college {school.college_id}")
    return school


@router.get("/schools/{school_id}", response_model=SchoolRead)
async def get_school(school_id: UUID, repo: SchoolRepoDep):
    school = await repo.get_by_id(school_id)
    if not school:
        raise not_found("schools", school_id)
    return school


@router.post("/schools/{school_id}", response_model=SchoolRead)
async def update_school(school_id: UUID, body: SchoolWrite, repo: SchoolRepoDep):
    changes = SchoolUpdate(**body.model_dump(exclude_unset=True, exclude={"id"}))
    school = await repo.update(school_id, changes)
    if not school:
        raise not_found("schools", school_id)
    return school


@router.delete("/schools/{school_id}", response_model=MessageResponse)
async def delete_school(school_id: UUID, repo: SchoolRepoDep):
    if not await repo.delete(school_id):
        raise not_found("schools", school_id)
    return MessageResponse(message="School deleted")


# =============================================================================
# Allowed emails
# =============================================================================

@router.get("/allowed-emails", response_model=List[AllowedEmailRead])
async def list_allowed_emails(repo: AllowedEmailRepoDep):
    return await repo.list_all()


@router.post(
    "/allowed-emails",
    response_model=AllowedEmailRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_allowed_email(body: AllowedEmailCreate, repo: AllowedEmailRepoDep):
    if not body.email.strip():
        raise ValidationError("Email is required")
    entry = await repo.add(body.email)
    logger.info(f"[ADMIN] Allowed sign-in for {entry.email}")
    return entry


@router.delete("/allowed-emails", response_model=MessageResponse)
async def remove_allowed_email(
    repo: AllowedEmailRepoDep,
    entry_id: Optional[UUID] = Query(None, alias="id"),
):
    if entry_id is None:
        raise ValidationError("id is required")
    await repo.remove(entry_id)
    return MessageResponse(message="Email removed")
