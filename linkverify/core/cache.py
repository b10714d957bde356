"""
Link validity caches.

The engine only ever reads from a cache; verifiers that confirm a link
may write back through the WritableCache protocol. Implementations must
be safe to call from many worker threads at once.
"""

import threading
import time
from typing import Optional, Protocol, runtime_checkable

# Default TTLs for cached results
DEFAULT_VALID_TTL = 21600  # 6 hours for valid links
DEFAULT_INVALID_TTL = 900  # 15 minutes for invalid links


@runtime_checkable
class Cache(Protocol):
    """Read side of a link cache, keyed by link href."""

    def is_valid(self, key: str) -> Optional[bool]:
        """Return True if known valid, False if known invalid, None if unknown.

        Only True lets the engine skip verification.
        """
        ...


@runtime_checkable
class WritableCache(Cache, Protocol):
    """A cache that verifiers can record results into."""

    def record(self, key: str, valid: bool) -> None:
        ...


class NullCache:
    """A cache that knows nothing."""

    def is_valid(self, key: str) -> Optional[bool]:
        return None


class _CacheEntry:
    """Time-bounded cache entry for a validation result."""

    __slots__ = ("valid", "expires_at")

    def __init__(self, valid: bool, ttl: float) -> None:
        self.valid = valid
        self.expires_at = time.monotonic() + ttl

    @property
    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class MemoryCache:
    """Thread-safe in-memory cache with separate TTLs for valid and invalid links.

    Args:
        valid_ttl: Seconds a valid result is trusted
        invalid_ttl: Seconds an invalid result is remembered
    """

    def __init__(
        self,
        valid_ttl: float = DEFAULT_VALID_TTL,
        invalid_ttl: float = DEFAULT_INVALID_TTL,
    ) -> None:
        self.valid_ttl = valid_ttl
        self.invalid_ttl = invalid_ttl
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def is_valid(self, key: str) -> Optional[bool]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired:
                del self._entries[key]
                return None
            return entry.valid

    def record(self, key: str, valid: bool) -> None:
        ttl = self.valid_ttl if valid else self.invalid_ttl
        with self._lock:
            self._entries[key] = _CacheEntry(valid, ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_valid(key) is not None
