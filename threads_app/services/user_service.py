"""
User actions: profile upsert, profile lookups, user search and the reply
activity feed.
"""

import logging
from typing import List, Optional

from beanie import PydanticObjectId
from beanie.operators import NE, In

from threads_app.cache import revalidate_path
from threads_app.errors import action
from threads_app.models import Thread, User
from threads_app.schemas.views import (
    CommunitySummary,
    ThreadView,
    UserPage,
    UserPosts,
    UserProfile,
    UserSummary,
)
from threads_app.services import populate
from threads_app.services.query import has_next_page, name_search, skip_amount, sort_direction

logger = logging.getLogger(__name__)

PROFILE_EDIT_PATH = "/profile/edit"


@action("Failed to create/update user")
async def update_user(
    user_id: str,
    username: str,
    name: str,
    bio: str,
    image: str,
    path: str,
) -> User:
    """
    Create or update the profile for an external identity and mark it onboarded.
    Only edits made from the profile-edit page revalidate a cached page.
    """
    fields = {
        "username": username.lower(),
        "name": name,
        "bio": bio,
        "image": image,
        "onboarded": True,
    }
    user = await User.find_one(User.external_id == user_id)
    if user is None:
        user = User(external_id=user_id, **fields)
        await user.insert()
        logger.info("Created profile %s for external_id=%s", user.id, user_id)
    else:
        for key, value in fields.items():
            setattr(user, key, value)
        await user.save_changes()
        logger.info("Updated profile %s", user.id)

    if path == PROFILE_EDIT_PATH:
        revalidate_path(path)
    return user


@action("Failed to fetch user")
async def fetch_user(user_id: str) -> Optional[UserProfile]:
    """Profile for an external id with its communities resolved, or None."""
    user = await User.find_one(User.external_id == user_id)
    if user is None:
        return None
    communities = await populate.communities_by_id(user.communities)
    return UserProfile(
        **UserSummary.from_document(user).model_dump(),
        bio=user.bio,
        onboarded=user.onboarded,
        thread_ids=[str(t) for t in user.threads],
        communities=[
            CommunitySummary.from_document(c)
            for c in populate.in_order(user.communities, communities)
        ],
    )


@action("Cannot fetch users threads")
async def fetch_user_posts(user_id: str) -> Optional[UserPosts]:
    """The user's threads with direct replies and their authors resolved."""
    user = await User.find_one(User.external_id == user_id)
    if user is None:
        return None
    found = await populate.threads_by_id(user.threads)
    threads = populate.in_order(user.threads, found)
    return UserPosts(
        user=UserSummary.from_document(user),
        threads=await populate.thread_views(threads, depth=1),
    )


@action("Cannot get users")
async def fetch_users(
    user_id: str,
    search_string: str = "",
    page_number: int = 1,
    page_size: int = 20,
    sort_by: str = "desc",
) -> UserPage:
    """One page of users other than user_id, optionally filtered by name/username."""
    skip = skip_amount(page_number, page_size)

    criteria = [NE(User.external_id, user_id)]
    search = name_search(search_string)
    if search is not None:
        criteria.append(search)

    # Count and page are separate round trips
    total = await User.find(*criteria).count()
    users = (
        await User.find(*criteria)
        .sort(("created_at", sort_direction(sort_by)))
        .skip(skip)
        .limit(page_size)
        .to_list()
    )
    return UserPage(
        users=[UserSummary.from_document(u) for u in users],
        is_next=has_next_page(total, skip, len(users)),
    )


@action("Could not get activity")
async def get_activity(user_id: PydanticObjectId) -> List[ThreadView]:
    """
    Replies other users left on any of user_id's threads.
    No de-duplication, no pagination.
    """
    user_threads = await Thread.find(Thread.author == user_id).to_list()

    child_thread_ids: List[PydanticObjectId] = []
    for thread in user_threads:
        child_thread_ids.extend(thread.children)

    replies = await Thread.find(
        In(Thread.id, child_thread_ids),
        NE(Thread.author, user_id),
    ).to_list()
    return await populate.thread_views(replies, depth=0)
