"""
Page handlers.

Each page follows the same flow: resolve the signed-in identity (render
nothing when there is none), load the profile, send people who have not
finished onboarding to /onboarding, then load the page's data. Payloads are
cached per path and viewer until an action revalidates the path.
"""

import logging
from typing import Any, Awaitable, Callable, Hashable, Optional, Union

from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import RedirectResponse

from threads_app.api.auth import Identity, OptionalIdentity
from threads_app.cache import page_cache
from threads_app.config import get_settings
from threads_app.schemas.views import UserProfile
from threads_app.services import community_service, thread_service, user_service

logger = logging.getLogger(__name__)
router = APIRouter()

ONBOARDING_PATH = "/onboarding"
HOME_PATH = "/"

PagePayload = Union[None, dict, RedirectResponse]


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


async def _onboarded_profile(identity: Identity) -> Union[UserProfile, RedirectResponse]:
    profile = await user_service.fetch_user(identity.external_id)
    if profile is None or not profile.onboarded:
        return _redirect(ONBOARDING_PATH)
    return profile


async def _render(
    request: Request,
    key: Hashable,
    build: Callable[[], Awaitable[Any]],
) -> dict:
    async def render() -> dict:
        return jsonable_encoder(await build())

    return await page_cache.get_or_render(request.url.path, key, render)


@router.get("/", response_model=None, summary="Home feed")
async def home_page(
    request: Request,
    identity: OptionalIdentity,
    page: int = Query(1, ge=1),
) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        result = await thread_service.fetch_posts(page, get_settings().feed_page_size)
        return {"threads": result.threads, "is_next": result.is_next, "page": page}

    return await _render(request, (identity.external_id, page), build)


@router.get("/activity", response_model=None, summary="Replies to my threads")
async def activity_page(request: Request, identity: OptionalIdentity) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        activity = await user_service.get_activity(PydanticObjectId(profile.id))
        return {"activity": activity}

    return await _render(request, identity.external_id, build)


@router.get("/search", response_model=None, summary="Search users")
async def search_page(
    request: Request,
    identity: OptionalIdentity,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        result = await user_service.fetch_users(
            user_id=identity.external_id,
            search_string=q or "",
            page_number=page,
            page_size=get_settings().search_page_size,
        )
        return {"users": result.users, "is_next": result.is_next, "page": page}

    return await _render(request, (identity.external_id, q, page), build)


@router.get("/communities", response_model=None, summary="Search communities")
async def communities_page(
    request: Request,
    identity: OptionalIdentity,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        result = await community_service.fetch_communities(
            search_string=q or "",
            page_number=page,
            page_size=get_settings().search_page_size,
        )
        return {"communities": result.communities, "is_next": result.is_next, "page": page}

    return await _render(request, (identity.external_id, q, page), build)


@router.get("/communities/{community_id}", response_model=None, summary="Community page")
async def community_page(request: Request, community_id: str, identity: OptionalIdentity) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        details = await community_service.fetch_community_details(community_id)
        if details is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
        posts = await community_service.fetch_community_posts(community_id)
        return {"community": details, "threads": posts.threads if posts else []}

    return await _render(request, identity.external_id, build)


@router.get("/thread/{thread_id}", response_model=None, summary="Thread page")
async def thread_page(
    request: Request,
    thread_id: PydanticObjectId,
    identity: OptionalIdentity,
) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        thread = await thread_service.fetch_thread_by_id(thread_id)
        if thread is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
        return {"thread": thread, "viewer": profile}

    return await _render(request, identity.external_id, build)


@router.get("/profile/edit", response_model=None, summary="Edit my profile")
async def edit_profile_page(request: Request, identity: OptionalIdentity) -> PagePayload:
    if identity is None:
        return None
    profile = await _onboarded_profile(identity)
    if isinstance(profile, RedirectResponse):
        return profile

    async def build() -> dict:
        return {"user": profile}

    return await _render(request, identity.external_id, build)


@router.get("/profile/{user_id}", response_model=None, summary="Profile page")
async def profile_page(request: Request, user_id: str, identity: OptionalIdentity) -> PagePayload:
    if identity is None:
        return None
    viewer = await _onboarded_profile(identity)
    if isinstance(viewer, RedirectResponse):
        return viewer

    async def build() -> dict:
        user = await user_service.fetch_user(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        posts = await user_service.fetch_user_posts(user_id)
        return {
            "user": user,
            "threads": posts.threads if posts else [],
            "is_own_profile": user.external_id == identity.external_id,
        }

    return await _render(request, identity.external_id, build)


@router.get(ONBOARDING_PATH, response_model=None, summary="Onboarding form")
async def onboarding_page(identity: OptionalIdentity) -> PagePayload:
    """Form defaults for the one-time profile step; onboarded users go home."""
    if identity is None:
        return None
    profile = await user_service.fetch_user(identity.external_id)
    if profile is not None and profile.onboarded:
        return _redirect(HOME_PATH)
    return {
        "user": {
            "external_id": identity.external_id,
            "username": profile.username if profile else "",
            "name": profile.name if profile else "",
            "bio": profile.bio if profile else "",
            "image": profile.image if profile else "",
            "email": identity.email,
        }
    }
