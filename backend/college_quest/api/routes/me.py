"""
Current User Route
"""

from fastapi import APIRouter

from college_quest.api.dependencies import CurrentUserDep, ProfileRepoDep
from college_quest.api.schemas import MeResponse


router = APIRouter(prefix="/api", tags=["users"])


@router.get("/me", response_model=MeResponse)
async def get_me(
    profiles: ProfileRepoDep,
    user: CurrentUserDep,
):
    """Caller identity merged with their profile row, if any."""
    profile = await profiles.get(user.id)
    return MeResponse(
        id=user.id,
        email=user.email,
        display_name=(profile.display_name if profile else None) or user.display_name,
        role=profile.role if profile else "user",
        avatar_url=user.avatar_url,
    )
