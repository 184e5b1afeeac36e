"""
Action errors.

Every action re-raises failures as ActionError with a fixed, human-readable
prefix followed by the original message. The root cause stays reachable
through __cause__ so the HTTP layer can pick a status code.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from bson.errors import InvalidId
from fastapi import status
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


class NotFoundError(LookupError):
    """A referenced user, thread or community does not exist."""


class ConflictError(ValueError):
    """The write would duplicate existing state (e.g. an existing member)."""


class PermissionDeniedError(PermissionError):
    """The current user may not perform the action."""


class ActionError(Exception):
    """Failure of a server-side action, message prefixed with the action's label."""

    def __init__(self, prefix: str, original: BaseException):
        self.prefix = prefix
        self.original = original
        super().__init__(f"{prefix}: {original}")

    @property
    def root_cause(self) -> BaseException:
        """Innermost non-ActionError exception."""
        cause: BaseException = self.original
        while isinstance(cause, ActionError):
            cause = cause.original
        return cause


def action(prefix: str) -> Callable[[F], F]:
    """Wrap an async action so any exception is re-raised as ActionError(prefix)."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.debug("%s failed: %s", func.__name__, e)
                raise ActionError(prefix, e) from e

        return wrapper  # type: ignore[return-value]

    return decorator


_STATUS_BY_CAUSE = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidId, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (DuplicateKeyError, status.HTTP_409_CONFLICT),
)


def http_status_for(error: ActionError) -> int:
    """HTTP status for an action failure, chosen by its root cause."""
    cause = error.root_cause
    for exc_type, code in _STATUS_BY_CAUSE:
        if isinstance(cause, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
