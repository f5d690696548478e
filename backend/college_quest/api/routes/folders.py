"""
Favorite Folders API Routes

User-owned folders of colleges. Every folder route checks ownership first
and answers 404 for folders the caller does not own.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from college_quest.api.dependencies import (
    CurrentUserDep,
    CurrentUserIdDep,
    FavoriteRepoDep,
    FolderRepoDep,
    ProfileRepoDep,
)
from college_quest.api.schemas import (
    CollegeRef,
    FolderCreate,
    FolderItemsResponse,
    FolderListResponse,
    FolderPatch,
    FolderRead,
    MessageResponse,
)
from college_quest.config.settings import settings
from college_quest.infrastructure.db.models.favorite import (
    FavoriteFolder,
    FavoriteFolderUpdate,
)
from college_quest.infrastructure.db.repositories import FolderRepository
from college_quest.infrastructure.exceptions import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/folders", tags=["folders"])


async def get_owned_folder(
    folder_id: UUID,
    repo: FolderRepository,
    user_id: UUID
) -> FavoriteFolder:
    folder = await repo.get_owned(folder_id, user_id)
    if not folder:
        raise NotFoundError(
            "Folder not found",
            operation="select",
            table="favorite_folders",
        )
    return folder


@router.get("", response_model=FolderListResponse)
async def list_folders(
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    return FolderListResponse(folders=await repo.list_for_user(user_id))


@router.post("", response_model=FolderRead, status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: FolderCreate,
    repo: FolderRepoDep,
    profiles: ProfileRepoDep,
    user: CurrentUserDep,
):
    user_id = user.id
    if not body.name:
        raise ValidationError("Folder name is required")

    if await repo.count_for_user(user_id) >= settings.max_folders_per_user:
        raise ValidationError(
            f"Maximum of {settings.max_folders_per_user} folders reached",
            details={"limit": settings.max_folders_per_user},
        )

    await profiles.ensure(user_id, email=user.email, display_name=user.display_name)

    folder = await repo.create(user_id, body.name, body.color)
    logger.info(f"User {user_id} created folder {folder.id}")
    return folder


@router.get("/all-items", response_model=FolderItemsResponse)
async def all_saved_college_ids(
    repo: FolderRepoDep,
    favorites: FavoriteRepoDep,
    user_id: CurrentUserIdDep,
):
    """Every college the user saved, as a favorite or in any folder."""
    ids = list(await favorites.list_college_ids(user_id))
    seen = set(ids)
    for college_id in await repo.all_item_ids_for_user(user_id):
        if college_id not in seen:
            seen.add(college_id)
            ids.append(college_id)
    return FolderItemsResponse(college_ids=ids)


@router.get("/{folder_id}", response_model=FolderRead)
async def get_folder(
    folder_id: UUID,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    return await get_owned_folder(folder_id, repo, user_id)


@router.patch("/{folder_id}", response_model=FolderRead)
async def update_folder(
    folder_id: UUID,
    body: FolderPatch,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    folder = await get_owned_folder(folder_id, repo, user_id)
    changes = body.model_dump(exclude_unset=True)
    if "name" in changes and not changes["name"]:
        raise ValidationError("Folder name cannot be empty")
    return await repo.update(folder, FavoriteFolderUpdate(**changes))


@router.delete("/{folder_id}", response_model=MessageResponse)
async def delete_folder(
    folder_id: UUID,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    folder = await get_owned_folder(folder_id, repo, user_id)
    await repo.delete(folder)
    logger.info(f"User {user_id} deleted folder {folder_id}")
    return MessageResponse(message="Folder deleted")


# =============================================================================
# Items
# =============================================================================

@router.get("/{folder_id}/items", response_model=FolderItemsResponse)
async def list_folder_items(
    folder_id: UUID,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    await get_owned_folder(folder_id, repo, user_id)
    return FolderItemsResponse(college_ids=await repo.list_item_ids(folder_id))


@router.post(
    "/{folder_id}/items",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_folder_item(
    folder_id: UUID,
    body: CollegeRef,
    response: Response,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
):
    await get_owned_folder(folder_id, repo, user_id)
    if not await repo.add_item(folder_id, body.college_id):
        response.status_code = status.HTTP_200_OK
        return MessageResponse(message="Already in folder")
    return MessageResponse(message="Added to folder")


@router.delete("/{folder_id}/items", response_model=MessageResponse)
async def remove_folder_item(
    folder_id: UUID,
    repo: FolderRepoDep,
    user_id: CurrentUserIdDep,
    college_id: UUID = Query(..., alias="collegeId"),
):
    await get_owned_folder(folder_id, repo, user_id)
    await repo.remove_item(folder_id, college_id)
    return MessageResponse(message="Removed from folder")
