"""Skip-if-running guard for periodic jobs."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Runs an async job unless a previous run of it is still in progress.

    An overlapping call is skipped (returns None) and logged, never queued.
    """

    def __init__(self, name: str, job: Callable[[], Awaitable[T]]) -> None:
        self.name = name
        self._job = job
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def __call__(self) -> T | None:
        if self._lock.locked():
            logger.warning("Job %s is still running; skipping this tick", self.name)
            return None
        async with self._lock:
            return await self._job()
