"""
Populated response views.

Stored documents hold ObjectIds; these views are what the actions return after
resolving ("populating") those ids into summaries of the referenced records.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from threads_app.models import Community, Thread, User


class UserSummary(BaseModel):
    id: str
    external_id: str
    name: str
    username: str
    image: Optional[str] = None

    @classmethod
    def from_document(cls, user: User) -> "UserSummary":
        return cls(
            id=str(user.id),
            external_id=user.external_id,
            name=user.name,
            username=user.username,
            image=user.image,
        )


class CommunitySummary(BaseModel):
    id: str
    external_id: str
    name: str
    username: str
    image: Optional[str] = None

    @classmethod
    def from_document(cls, community: Community) -> "CommunitySummary":
        return cls(
            id=str(community.id),
            external_id=community.external_id,
            name=community.name,
            username=community.username,
            image=community.image,
        )


class ThreadView(BaseModel):
    """
    A thread with its references resolved. children is filled only down to
    the depth the action populated; child_ids always lists every reply.
    """

    id: str
    text: str
    author: Optional[UserSummary] = None
    community: Optional[CommunitySummary] = None
    created_at: datetime
    parent_id: Optional[str] = None
    child_ids: List[str] = Field(default_factory=list)
    children: List["ThreadView"] = Field(default_factory=list)

    @classmethod
    def from_document(
        cls,
        thread: Thread,
        author: Optional[User] = None,
        community: Optional[Community] = None,
        children: Optional[List["ThreadView"]] = None,
    ) -> "ThreadView":
        return cls(
            id=str(thread.id),
            text=thread.text,
            author=UserSummary.from_document(author) if author else None,
            community=CommunitySummary.from_document(community) if community else None,
            created_at=thread.created_at,
            parent_id=thread.parent_id,
            child_ids=[str(c) for c in thread.children],
            children=children or [],
        )


ThreadView.model_rebuild()


class UserProfile(UserSummary):
    bio: Optional[str] = None
    onboarded: bool = False
    thread_ids: List[str] = Field(default_factory=list)
    communities: List[CommunitySummary] = Field(default_factory=list)


class CommunityDetails(CommunitySummary):
    bio: Optional[str] = None
    created_by: Optional[UserSummary] = None
    members: List[UserSummary] = Field(default_factory=list)


class UserPosts(BaseModel):
    user: UserSummary
    threads: List[ThreadView] = Field(default_factory=list)


class CommunityPosts(BaseModel):
    community: CommunitySummary
    threads: List[ThreadView] = Field(default_factory=list)


class UserPage(BaseModel):
    users: List[UserSummary]
    is_next: bool


class CommunityPage(BaseModel):
    communities: List[CommunityDetails]
    is_next: bool


class ThreadPage(BaseModel):
    threads: List[ThreadView]
    is_next: bool
