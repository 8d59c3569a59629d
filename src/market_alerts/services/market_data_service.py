"""Cache -> provider chain -> store fallback, shared by the currency and stock services.

A resolved value is written through to the cache and persisted in a background
task the caller never awaits. When every provider fails, the most recent stored
record inside the freshness window is returned instead (not cached).
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Generic, TypeVar

from market_alerts.cache import TTLCache
from market_alerts.errors import (AllProvidersFailed, DataUnavailable,
                                  PersistenceWriteFailed)
from market_alerts.providers.core import ProviderChain
from market_alerts.utils import utcnow

logger = logging.getLogger(__name__)

P = TypeVar("P")
T = TypeVar("T")

FALLBACK_WINDOW = timedelta(hours=24)


@dataclass
class BatchReport:
    """Outcome of a scheduled batch; one failing item never stops the rest."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class MarketDataService(Generic[P, T]):
    """Base for one market data domain (currency, stock)."""

    def __init__(
        self,
        chain: ProviderChain[P],
        cache: TTLCache,
        *,
        cache_ttl_seconds: float,
        fallback_window: timedelta = FALLBACK_WINDOW,
    ) -> None:
        self._chain = chain
        self._cache = cache
        self._ttl = cache_ttl_seconds
        self._fallback_window = fallback_window
        self._pending_writes: set[asyncio.Task[Any]] = set()

    @property
    def chain(self) -> ProviderChain[P]:
        return self._chain

    async def _get_value(
        self,
        cache_key: str,
        *,
        fetch: Callable[[P], Awaitable[T]],
        validate: Callable[[T], None],
        persist: Callable[[T], object],
        fallback: Callable[[datetime], T | None],
    ) -> T:
        """Resolve one value through cache, chain, and store fallback.

        Args:
            cache_key: Domain-scoped key (e.g. "rates:USD").
            fetch: Issues the query against one provider.
            validate: Raises ValueError when a provider payload is malformed.
            persist: Blocking store write, run in a background thread.
            fallback: Blocking store read of the newest record observed after a cutoff.

        Raises:
            DataUnavailable: If every provider failed and no fresh record exists.
        """
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s", cache_key)
            return cached

        try:
            resolution = await self._chain.resolve(fetch, validate=validate, label=cache_key)
        except AllProvidersFailed as e:
            cutoff = utcnow() - self._fallback_window
            stored = await asyncio.to_thread(fallback, cutoff)
            if stored is None:
                logger.error("No data for %s: %s", cache_key, e)
                raise DataUnavailable(
                    f"Market data for {cache_key.split(':', 1)[-1]} is currently unavailable"
                ) from e
            logger.warning("Serving stored data for %s after provider failure", cache_key)
            return stored

        value = resolution.value
        self._cache.set(cache_key, value, self._ttl)
        self._persist_in_background(persist, value, cache_key)
        return value

    def _persist_in_background(
        self, write: Callable[[T], object], value: T, label: str
    ) -> None:
        task = asyncio.create_task(asyncio.to_thread(write, value), name=f"persist:{label}")
        self._pending_writes.add(task)
        task.add_done_callback(partial(self._on_write_done, label))

    def _on_write_done(self, label: str, task: asyncio.Task[Any]) -> None:
        self._pending_writes.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            failure = PersistenceWriteFailed(f"Failed to persist {label}: {exc}")
            logger.error("%s", failure, exc_info=exc)

    async def drain_pending_writes(self) -> None:
        """Wait for every background persistence task started so far."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def close(self) -> None:
        await self._chain.close()
