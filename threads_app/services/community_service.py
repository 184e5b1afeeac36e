"""
Community actions.

Membership is recorded twice (Community.members and User.communities). Each
mutation below writes both sides one after the other; there is no transaction,
so a failure between writes leaves the two collections out of step.
"""

import logging
from typing import Dict, List, Optional, Set

from beanie import PydanticObjectId
from beanie.operators import In, Pull

from threads_app.cache import revalidate_path
from threads_app.errors import ConflictError, NotFoundError, PermissionDeniedError, action
from threads_app.models import Community, Thread, User
from threads_app.schemas.views import (
    CommunityDetails,
    CommunityPage,
    CommunityPosts,
    CommunitySummary,
    UserSummary,
)
from threads_app.services import populate
from threads_app.services.query import has_next_page, name_search, skip_amount, sort_direction
from threads_app.services.thread_service import fetch_all_child_threads

logger = logging.getLogger(__name__)


async def _get_community(community_id: str) -> Community:
    community = await Community.find_one(Community.external_id == community_id)
    if community is None:
        raise NotFoundError("Community not found")
    return community


async def _get_user(user_id: str) -> User:
    user = await User.find_one(User.external_id == user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _check_creator(community: Community, requested_by: Optional[PydanticObjectId]) -> None:
    if requested_by is not None and community.created_by != requested_by:
        raise PermissionDeniedError("Only the community creator can do this")


async def _details(communities: List[Community]) -> List[CommunityDetails]:
    """Communities with creator and members resolved, one users query in total."""
    users: Dict[PydanticObjectId, User] = await populate.users_by_id(
        [c.created_by for c in communities] + [m for c in communities for m in c.members]
    )
    details = []
    for c in communities:
        creator = users.get(c.created_by)
        details.append(
            CommunityDetails(
                **CommunitySummary.from_document(c).model_dump(),
                bio=c.bio,
                created_by=UserSummary.from_document(creator) if creator else None,
                members=[UserSummary.from_document(u) for u in populate.in_order(c.members, users)],
            )
        )
    return details


@action("Cannot create community")
async def create_community(
    id: str,
    name: str,
    username: str,
    image: str,
    bio: str,
    created_by_id: str,
) -> Community:
    """Create a community owned by the user with external id created_by_id, who joins it."""
    user = await _get_user(created_by_id)

    community = Community(
        external_id=id,
        name=name,
        username=username,
        image=image,
        bio=bio,
        created_by=user.id,
        members=[user.id],
    )
    await community.insert()

    user.communities.append(community.id)
    await user.save_changes()

    logger.info("User %s created community %s (%s)", user.id, community.id, id)
    return community


@action("Could not delete community")
async def delete_community(
    community_id: str,
    requested_by: Optional[PydanticObjectId] = None,
) -> Community:
    """
    Delete a community with its threads and their replies. The community id
    leaves every member's list and the deleted thread ids leave every author's.
    """
    community = await _get_community(community_id)
    _check_creator(community, requested_by)

    await community.delete()

    doomed = await Thread.find(Thread.community == community.id).to_list()
    for root in list(doomed):
        doomed.extend(await fetch_all_child_threads(root.id))
    doomed_ids: Set[PydanticObjectId] = {t.id for t in doomed}
    if doomed_ids:
        await Thread.find(In(Thread.id, list(doomed_ids))).delete()

    members = await User.find(User.communities == community.id).to_list()
    affected: Dict[PydanticObjectId, User] = {u.id: u for u in members}
    affected.update(await populate.users_by_id(t.author for t in doomed if t.author not in affected))

    for user in affected.values():
        user.communities = [c for c in user.communities if c != community.id]
        user.threads = [t for t in user.threads if t not in doomed_ids]
        await user.save_changes()

    logger.info(
        "Deleted community %s (%d threads, %d users updated)",
        community.id,
        len(doomed),
        len(affected),
    )
    revalidate_path(f"/communities/{community.external_id}")
    for thread_id in sorted(str(i) for i in doomed_ids):
        revalidate_path(f"/thread/{thread_id}")
    return community


@action("Member could not be added to the community")
async def add_member_to_community(
    community_id: str,
    member_id: str,
    requested_by: Optional[PydanticObjectId] = None,
) -> Community:
    """
    Add a user to a community on both sides. When requested_by is given it must
    be the new member or the community's creator.
    """
    community = await _get_community(community_id)
    user = await _get_user(member_id)
    if requested_by is not None and requested_by not in (user.id, community.created_by):
        raise PermissionDeniedError("Only the member or the community creator can do this")

    if user.id in community.members:
        raise ConflictError("User is already in this community")

    community.members.append(user.id)
    await community.save_changes()

    user.communities.append(community.id)
    await user.save_changes()

    logger.info("User %s joined community %s", user.id, community.id)
    return community


@action("User could not be removed from the community")
async def remove_user_from_community(
    user_id: str,
    community_id: str,
    requested_by: Optional[PydanticObjectId] = None,
) -> dict:
    """
    Remove a member from a community. When requested_by is given it must be
    the member or the community's creator.
    """
    user = await User.find_one(User.external_id == user_id)
    community = await Community.find_one(Community.external_id == community_id)

    if user is None:
        raise NotFoundError("User not found")
    if community is None:
        raise NotFoundError("Community not found")
    if requested_by is not None and requested_by not in (user.id, community.created_by):
        raise PermissionDeniedError("Only the member or the community creator can do this")

    await Community.find_one(Community.id == community.id).update(Pull({"members": user.id}))
    await User.find_one(User.id == user.id).update(Pull({"communities": community.id}))

    logger.info("User %s removed from community %s", user.id, community.id)
    return {"success": True}


@action("Could not update community info")
async def update_community_info(
    community_id: str,
    name: str,
    username: str,
    image: str,
    requested_by: Optional[PydanticObjectId] = None,
) -> Community:
    community = await _get_community(community_id)
    _check_creator(community, requested_by)

    community.name = name
    community.username = username
    community.image = image
    await community.save_changes()
    return community


@action("Cannot fetch community details")
async def fetch_community_details(id: str) -> Optional[CommunityDetails]:
    community = await Community.find_one(Community.external_id == id)
    if community is None:
        return None
    return (await _details([community]))[0]


@action("Cannot fetch community threads")
async def fetch_community_posts(id: str) -> Optional[CommunityPosts]:
    """The community's threads with authors and direct replies resolved."""
    community = await Community.find_one(Community.external_id == id)
    if community is None:
        return None
    found = await populate.threads_by_id(community.threads)
    threads = populate.in_order(community.threads, found)
    return CommunityPosts(
        community=CommunitySummary.from_document(community),
        threads=await populate.thread_views(threads, depth=1),
    )


@action("Cannot fetch communities")
async def fetch_communities(
    search_string: str = "",
    page_number: int = 1,
    page_size: int = 20,
    sort_by: str = "desc",
) -> CommunityPage:
    skip = skip_amount(page_number, page_size)

    criteria = []
    search = name_search(search_string)
    if search is not None:
        criteria.append(search)

    total = await Community.find(*criteria).count()
    communities = (
        await Community.find(*criteria)
        .sort(("created_at", sort_direction(sort_by)))
        .skip(skip)
        .limit(page_size)
        .to_list()
    )
    return CommunityPage(
        communities=await _details(communities),
        is_next=has_next_page(total, skip, len(communities)),
    )
