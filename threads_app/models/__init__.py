"""Beanie document models."""

from threads_app.models.community import Community
from threads_app.models.thread import Thread
from threads_app.models.user import User

__all__ = ["User", "Thread", "Community"]
