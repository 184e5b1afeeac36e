"""
User APIs: save the profile form (onboarding and edit profile), look up and
search users.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from threads_app.api.auth import CurrentIdentity, CurrentUser
from threads_app.schemas.user import UserValidation
from threads_app.schemas.views import UserPage, UserProfile, UserSummary
from threads_app.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter()


class ProfileRequest(UserValidation):
    """Profile form plus the page it was submitted from."""

    path: str = "/onboarding"


@router.post("/me", response_model=UserSummary, summary="Create or update my profile")
async def save_profile(body: ProfileRequest, identity: CurrentIdentity) -> UserSummary:
    user = await user_service.update_user(
        user_id=identity.external_id,
        username=body.username,
        name=body.name,
        bio=body.bio,
        image=body.profile_photo,
        path=body.path,
    )
    return UserSummary.from_document(user)


@router.get("", response_model=UserPage, summary="Search users")
async def search_users(
    current_user: CurrentUser,
    q: str = "",
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = "desc",
) -> UserPage:
    return await user_service.fetch_users(
        user_id=current_user.external_id,
        search_string=q,
        page_number=page,
        page_size=page_size,
        sort_by=sort_by,
    )


@router.get("/{user_id}", response_model=UserProfile, summary="Get a profile")
async def get_user(user_id: str, current_user: CurrentUser) -> UserProfile:
    profile = await user_service.fetch_user(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile
