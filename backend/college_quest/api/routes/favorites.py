"""
Favorites API Routes

A user's bookmarked colleges. Adding an existing favorite is not an error.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Response, status

from college_quest.api.dependencies import (
    CurrentUserDep,
    CurrentUserIdDep,
    FavoriteRepoDep,
    ProfileRepoDep,
)
from college_quest.api.schemas import (
    CollegeRef,
    FavoritesResponse,
    FavoriteStatus,
    MessageResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", response_model=FavoritesResponse)
async def list_favorites(
    repo: FavoriteRepoDep,
    user_id: CurrentUserIdDep,
):
    """Favorite college ids, newest first."""
    return FavoritesResponse(favorites=await repo.list_college_ids(user_id))


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "Already a favorite"}},
)
async def add_favorite(
    body: CollegeRef,
    response: Response,
    repo: FavoriteRepoDep,
    profiles: ProfileRepoDep,
    user: CurrentUserDep,
):
    await profiles.ensure(user.id, email=user.email, display_name=user.display_name)

    created = await repo.add(user.id, body.college_id)
    if not created:
        response.status_code = status.HTTP_200_OK
        return MessageResponse(message="Already in favorites")

    logger.info(f"User {user.id} favorited {body.college_id}")
    return MessageResponse(message="Added to favorites")


@router.get("/{college_id}", response_model=FavoriteStatus)
async def get_favorite_status(
    college_id: UUID,
    repo: FavoriteRepoDep,
    user_id: CurrentUserIdDep,
):
    return FavoriteStatus(is_favorite=await repo.exists(user_id, college_id))


@router.delete("/{college_id}", response_model=MessageResponse)
async def remove_favorite(
    college_id: UUID,
    repo: FavoriteRepoDep,
    user_id: CurrentUserIdDep,
):
    await repo.remove(user_id, college_id)
    return MessageResponse(message="Removed from favorites")
