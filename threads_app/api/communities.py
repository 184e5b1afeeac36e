"""
Community APIs: create, edit, delete, membership, and reads.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from threads_app.api.auth import CurrentUser
from threads_app.schemas.community import CommunityUpdate, CommunityValidation
from threads_app.schemas.views import CommunityDetails, CommunityPage, CommunityPosts, CommunitySummary
from threads_app.services import community_service

logger = logging.getLogger(__name__)
router = APIRouter()


class MemberRequest(BaseModel):
    user_id: Optional[str] = None  # External id; defaults to the caller


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CommunitySummary,
    summary="Create a community",
)
async def create_community(body: CommunityValidation, current_user: CurrentUser) -> CommunitySummary:
    community = await community_service.create_community(
        id=body.external_id or uuid.uuid4().hex,
        name=body.name,
        username=body.username,
        image=body.image,
        bio=body.bio,
        created_by_id=current_user.external_id,
    )
    return CommunitySummary.from_document(community)


@router.get("", response_model=CommunityPage, summary="Search communities")
async def list_communities(
    current_user: CurrentUser,
    q: str = "",
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = "desc",
) -> CommunityPage:
    return await community_service.fetch_communities(
        search_string=q,
        page_number=page,
        page_size=page_size,
        sort_by=sort_by,
    )


@router.get("/{community_id}", response_model=CommunityDetails, summary="Community details")
async def get_community(community_id: str, current_user: CurrentUser) -> CommunityDetails:
    details = await community_service.fetch_community_details(community_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
    return details


@router.get("/{community_id}/threads", response_model=CommunityPosts, summary="Community threads")
async def get_community_threads(community_id: str, current_user: CurrentUser) -> CommunityPosts:
    posts = await community_service.fetch_community_posts(community_id)
    if posts is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
    return posts


@router.patch("/{community_id}", response_model=CommunitySummary, summary="Edit a community")
async def update_community(
    community_id: str,
    body: CommunityUpdate,
    current_user: CurrentUser,
) -> CommunitySummary:
    community = await community_service.update_community_info(
        community_id,
        name=body.name,
        username=body.username,
        image=body.image,
        requested_by=current_user.id,
    )
    return CommunitySummary.from_document(community)


@router.delete("/{community_id}", response_model=dict, summary="Delete a community")
async def delete_community(community_id: str, current_user: CurrentUser) -> dict:
    await community_service.delete_community(community_id, requested_by=current_user.id)
    return {"success": True}


@router.post(
    "/{community_id}/members",
    status_code=status.HTTP_201_CREATED,
    response_model=CommunitySummary,
    summary="Join (or add a member to) a community",
)
async def add_member(
    community_id: str,
    body: MemberRequest,
    current_user: CurrentUser,
) -> CommunitySummary:
    community = await community_service.add_member_to_community(
        community_id,
        body.user_id or current_user.external_id,
        requested_by=current_user.id,
    )
    return CommunitySummary.from_document(community)


@router.delete(
    "/{community_id}/members/{user_id}",
    response_model=dict,
    summary="Leave (or remove a member from) a community",
)
async def remove_member(community_id: str, user_id: str, current_user: CurrentUser) -> dict:
    return await community_service.remove_user_from_community(
        user_id,
        community_id,
        requested_by=current_user.id,
    )
