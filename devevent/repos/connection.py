"""Lazily established, reused handle to the document store."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from devevent.domain.errors import ConnectionFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionManager(Generic[T]):
    """Holds at most one live handle and at most one in-flight connect attempt.

    Construct one per process and share it by reference. The first ``get()``
    starts the attempt; callers arriving while it is in flight await the same
    attempt. A successful handle is kept for the lifetime of the manager. A
    failed attempt is forgotten so the next ``get()`` tries again, and every
    caller that was waiting on it receives the same ``ConnectionFailure``.
    """

    def __init__(self, connect: Callable[[], Awaitable[T]]) -> None:
        self._connect = connect
        self._handle: T | None = None
        self._pending: asyncio.Task[T] | None = None
        self.attempts = 0

    @property
    def connected(self) -> bool:
        return self._handle is not None

    async def get(self) -> T:
        if self._handle is not None:
            return self._handle

        if self._pending is None:
            self.attempts += 1
            self._pending = asyncio.ensure_future(self._establish())
            self._pending.add_done_callback(self._on_attempt_done)

        # Shielded so one caller being cancelled does not abort the shared attempt.
        return await asyncio.shield(self._pending)

    async def _establish(self) -> T:
        logger.info("Connecting to document store (attempt %d)", self.attempts)
        try:
            return await self._connect()
        except ConnectionFailure:
            raise
        except Exception as exc:
            raise ConnectionFailure(str(exc) or type(exc).__name__) from exc

    def _on_attempt_done(self, task: asyncio.Task[T]) -> None:
        if task is not self._pending:
            return
        self._pending = None
        if task.cancelled():
            logger.warning("Connection attempt was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Connection attempt failed: %s", exc)
            return
        self._handle = task.result()
        logger.info("Document store connection established")
