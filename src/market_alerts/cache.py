"""In-process TTL cache in front of the provider chains."""
import threading
import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Key-value cache where every entry carries its own time-to-live.

    Keys are domain-scoped strings (e.g. "rates:USD", "quote:AAPL"). The cache
    is a performance layer only; a miss is the normal path to a provider fetch.
    Entries expire lazily on read. max_entries is advisory: when exceeded,
    expired entries are pruned, and live entries are kept.
    """

    def __init__(
        self,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds (last writer wins)."""
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)
            if len(self._entries) > self._max_entries:
                self._prune_expired()

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _prune_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (exp, _) in self._entries.items() if exp <= now]:
            del self._entries[key]
