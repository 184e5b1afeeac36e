"""
Rendered-page cache.

Page handlers store their payload under the page path plus a per-viewer key.
Actions call revalidate_path() after writes so the next request for that path
renders fresh data.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from threads_app.config import get_settings

logger = logging.getLogger(__name__)


class PageCache:
    """In-process map of (path, key) -> (expires_at, payload)."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self._ttl_seconds = ttl_seconds
        self._entries: Dict[Tuple[str, Hashable], Tuple[float, Any]] = {}

    @property
    def ttl_seconds(self) -> int:
        if self._ttl_seconds is not None:
            return self._ttl_seconds
        return get_settings().page_cache_ttl_seconds

    def get(self, path: str, key: Hashable) -> Optional[Any]:
        entry = self._entries.get((path, key))
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            self._entries.pop((path, key), None)
            return None
        return payload

    def set(self, path: str, key: Hashable, payload: Any) -> None:
        ttl = self.ttl_seconds
        if ttl <= 0:
            return
        now = time.monotonic()
        self._evict_expired(now)
        self._entries[(path, key)] = (now + ttl, payload)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]

    async def get_or_render(
        self,
        path: str,
        key: Hashable,
        render: Callable[[], Awaitable[Any]],
    ) -> Any:
        payload = self.get(path, key)
        if payload is not None:
            return payload
        payload = await render()
        self.set(path, key, payload)
        return payload

    def revalidate(self, path: str) -> int:
        """Drop every cached entry for path. Returns how many were dropped."""
        stale = [k for k in self._entries if k[0] == path]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


page_cache = PageCache()


def revalidate_path(path: str) -> None:
    """Invalidate the cached render of a page path."""
    dropped = page_cache.revalidate(path)
    logger.info("Revalidated %s (%d cached entries dropped)", path, dropped)
