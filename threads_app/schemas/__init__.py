"""Pydantic schemas: form validation and populated response views."""

from threads_app.schemas.community import CommunityUpdate, CommunityValidation
from threads_app.schemas.thread import CommentValidation, ThreadValidation
from threads_app.schemas.user import UserValidation
from threads_app.schemas.views import (
    CommunityDetails,
    CommunityPage,
    CommunityPosts,
    CommunitySummary,
    ThreadPage,
    ThreadView,
    UserPage,
    UserPosts,
    UserProfile,
    UserSummary,
)

__all__ = [
    "CommentValidation",
    "CommunityDetails",
    "CommunityPage",
    "CommunityPosts",
    "CommunitySummary",
    "CommunityUpdate",
    "CommunityValidation",
    "ThreadPage",
    "ThreadValidation",
    "ThreadView",
    "UserPage",
    "UserPosts",
    "UserProfile",
    "UserSummary",
    "UserValidation",
]
