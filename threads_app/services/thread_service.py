"""
Thread actions: posting, the home feed, thread detail, replies and deletion.
"""

import logging
from typing import List, Optional, Set

from beanie import PydanticObjectId
from beanie.operators import In, Push

from threads_app.cache import revalidate_path
from threads_app.errors import NotFoundError, PermissionDeniedError, action
from threads_app.models import Community, Thread, User
from threads_app.schemas.views import ThreadPage, ThreadView
from threads_app.services import populate
from threads_app.services.query import has_next_page, skip_amount

logger = logging.getLogger(__name__)


def _top_level() -> dict:
    """Filter for threads that are not replies (parent_id null or missing)."""
    return {"parent_id": None}


@action("Error creating thread")
async def create_thread(
    text: str,
    author: PydanticObjectId,
    community_id: Optional[str],
    path: str,
) -> Thread:
    """Post a top-level thread, optionally inside a community (by external id)."""
    user = await User.get(author)
    if user is None:
        raise NotFoundError("User not found")

    community: Optional[Community] = None
    if community_id:
        community = await Community.find_one(Community.external_id == community_id)
        if community is None:
            raise NotFoundError("Community not found")

    thread = Thread(text=text, author=user.id, community=community.id if community else None)
    await thread.insert()

    await User.find_one(User.id == user.id).update(Push({"threads": thread.id}))
    if community is not None:
        await Community.find_one(Community.id == community.id).update(Push({"threads": thread.id}))

    logger.info("User %s posted thread %s", user.id, thread.id)
    revalidate_path(path)
    return thread


@action("Cannot fetch posts")
async def fetch_posts(page_number: int = 1, page_size: int = 20) -> ThreadPage:
    """Top-level threads, newest first, with direct replies resolved."""
    skip = skip_amount(page_number, page_size)
    total = await Thread.find(_top_level()).count()
    threads = (
        await Thread.find(_top_level())
        .sort(-Thread.created_at)
        .skip(skip)
        .limit(page_size)
        .to_list()
    )
    return ThreadPage(
        threads=await populate.thread_views(threads, depth=1),
        is_next=has_next_page(total, skip, len(threads)),
    )


@action("Error fetching thread")
async def fetch_thread_by_id(thread_id: PydanticObjectId) -> Optional[ThreadView]:
    """A thread with replies and replies-to-replies resolved."""
    thread = await Thread.get(thread_id)
    if thread is None:
        return None
    views = await populate.thread_views([thread], depth=2)
    return views[0]


@action("Error adding comment to thread")
async def add_comment_to_thread(
    thread_id: PydanticObjectId,
    comment_text: str,
    user_id: PydanticObjectId,
    path: str,
) -> Thread:
    original = await Thread.get(thread_id)
    if original is None:
        raise NotFoundError("Thread not found")

    comment = Thread(text=comment_text, author=user_id, parent_id=str(original.id))
    await comment.insert()

    original.children.append(comment.id)
    await original.save_changes()

    logger.info("User %s replied to thread %s with %s", user_id, original.id, comment.id)
    revalidate_path(path)
    return comment


async def fetch_all_child_threads(thread_id: PydanticObjectId) -> List[Thread]:
    """Every descendant of a thread, breadth first."""
    descendants: List[Thread] = []
    level = [str(thread_id)]
    while level:
        children = await Thread.find(In(Thread.parent_id, level)).to_list()
        descendants.extend(children)
        level = [str(c.id) for c in children]
    return descendants


@action("Failed to delete thread")
async def delete_thread(
    thread_id: PydanticObjectId,
    path: str,
    requested_by: Optional[PydanticObjectId] = None,
) -> int:
    """
    Delete a thread and all of its replies, then drop the deleted ids from the
    authors, the communities and the parent thread. Besides path, every page
    that showed a deleted thread is revalidated. Returns how many threads were
    deleted. When requested_by is given it must be the thread's author.
    """
    main = await Thread.get(thread_id)
    if main is None:
        raise NotFoundError("Thread not found")
    if requested_by is not None and main.author != requested_by:
        raise PermissionDeniedError("Only the author can delete this thread")

    doomed = [main] + await fetch_all_child_threads(main.id)
    doomed_ids: Set[PydanticObjectId] = {t.id for t in doomed}

    await Thread.find(In(Thread.id, list(doomed_ids))).delete()

    authors = await populate.users_by_id(t.author for t in doomed)
    for user in authors.values():
        user.threads = [t for t in user.threads if t not in doomed_ids]
        await user.save_changes()

    communities = await populate.communities_by_id(t.community for t in doomed)
    for community in communities.values():
        community.threads = [t for t in community.threads if t not in doomed_ids]
        await community.save_changes()

    stale_paths = {path, "/activity"}
    stale_paths.update(f"/thread/{t.id}" for t in doomed)
    stale_paths.update(f"/profile/{u.external_id}" for u in authors.values())
    stale_paths.update(f"/communities/{c.external_id}" for c in communities.values())

    if main.is_reply:
        parent = await Thread.get(PydanticObjectId(main.parent_id))
        if parent is not None:
            parent.children = [c for c in parent.children if c != main.id]
            await parent.save_changes()
            # Thread pages show two levels of replies
            stale_paths.add(f"/thread/{parent.id}")
            if parent.is_reply:
                stale_paths.add(f"/thread/{parent.parent_id}")

    logger.info("Deleted thread %s and %d replies", main.id, len(doomed) - 1)
    for stale in sorted(stale_paths):
        revalidate_path(stale)
    return len(doomed)
