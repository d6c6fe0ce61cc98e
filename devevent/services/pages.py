"""Cache of rendered read payloads, invalidated per path."""

from __future__ import annotations

import time
from typing import Any, Callable


class PageCache:
    """Keeps payloads for *revalidate_seconds* or until a path is invalidated."""

    def __init__(
        self,
        revalidate_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.revalidate_seconds = revalidate_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, path: str) -> Any | None:
        entry = self._entries.get(path)
        if entry is None:
            return None
        stored_at, payload = entry
        if self._clock() - stored_at >= self.revalidate_seconds:
            del self._entries[path]
            return None
        return payload

    def put(self, path: str, payload: Any) -> None:
        self._entries[path] = (self._clock(), payload)

    def invalidate(self, path: str) -> bool:
        """Mark *path* stale. Returns whether anything was cached for it."""
        return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        self._entries.clear()


def event_path(slug: str) -> str:
    return f"/events/{slug}"


EVENTS_PATH = "/events"
