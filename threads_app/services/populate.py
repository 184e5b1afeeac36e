"""
Reference resolution.

Documents store referenced ids. These helpers load the referenced documents in
one $in query per collection and build the nested response views.
"""

from typing import Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from beanie.operators import In

from threads_app.models import Community, Thread, User
from threads_app.schemas.views import ThreadView


def _unique(ids: Iterable[Optional[PydanticObjectId]]) -> List[PydanticObjectId]:
    return [i for i in dict.fromkeys(ids) if i is not None]


async def users_by_id(ids: Iterable[Optional[PydanticObjectId]]) -> Dict[PydanticObjectId, User]:
    wanted = _unique(ids)
    if not wanted:
        return {}
    users = await User.find(In(User.id, wanted)).to_list()
    return {u.id: u for u in users}


async def communities_by_id(
    ids: Iterable[Optional[PydanticObjectId]],
) -> Dict[PydanticObjectId, Community]:
    wanted = _unique(ids)
    if not wanted:
        return {}
    communities = await Community.find(In(Community.id, wanted)).to_list()
    return {c.id: c for c in communities}


async def threads_by_id(ids: Iterable[Optional[PydanticObjectId]]) -> Dict[PydanticObjectId, Thread]:
    wanted = _unique(ids)
    if not wanted:
        return {}
    threads = await Thread.find(In(Thread.id, wanted)).to_list()
    return {t.id: t for t in threads}


def in_order(ids: Iterable[PydanticObjectId], found: Dict[PydanticObjectId, object]) -> list:
    """Documents in the order of ids; ids that no longer resolve are skipped."""
    return [found[i] for i in ids if i in found]


async def thread_views(threads: List[Thread], depth: int = 1) -> List[ThreadView]:
    """
    Build views for threads with author and community resolved and replies
    expanded depth levels down (0 = no replies, 1 = direct replies, ...).
    Each level costs one query per collection.
    """
    if not threads:
        return []

    child_views: Dict[str, ThreadView] = {}
    if depth > 0:
        found = await threads_by_id(c for t in threads for c in t.children)
        children = in_order(_unique(c for t in threads for c in t.children), found)
        child_views = {v.id: v for v in await thread_views(children, depth - 1)}

    authors = await users_by_id(t.author for t in threads)
    communities = await communities_by_id(t.community for t in threads)

    return [
        ThreadView.from_document(
            t,
            author=authors.get(t.author),
            community=communities.get(t.community) if t.community else None,
            children=[child_views[str(c)] for c in t.children if str(c) in child_views],
        )
        for t in threads
    ]
