"""Short lived per-user result cache."""
from __future__ import annotations

from collections.abc import Callable, Hashable
import copy
import hashlib
import logging
import time
from typing import Any

from .const import DEFAULT_CACHE_TTL

_LOGGER = logging.getLogger(__name__)

CacheKey = tuple[str, str, str, str, tuple[Hashable, ...]]


class ResultCache:
    """Results keyed by operation, portal, credentials and parameters for a fixed TTL.

    The cache is created by the caller and handed to each scraper that
    should use it. Scrapers read with ``get`` before logging in and write
    with ``set`` after a successful operation. Keys carry a digest of the
    password, so a hit needs the same portal and the same credentials that
    produced the result. Expired entries are purged on every write. Results
    are copied going in and coming out.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache."""
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, Any]] = {}

    @staticmethod
    def make_key(
        operation: str,
        school_url: str,
        username: str,
        password: str,
        *params: Hashable,
    ) -> CacheKey:
        digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return (operation, school_url.rstrip("/"), username, digest, params)

    def get(self, key: CacheKey) -> Any | None:
        """Return a copy of a cached result, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None

        _LOGGER.debug("Cache hit for %s", key[0])
        return copy.deepcopy(value)

    def set(self, key: CacheKey, value: Any) -> None:
        """Store a copy of a result until the TTL elapses."""
        self.purge_expired()
        self._entries[key] = (self._clock() + self.ttl, copy.deepcopy(value))

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [
            key for key, (expires_at, _value) in self._entries.items() if now >= expires_at
        ]
        for key in expired:
            del self._entries[key]

        if expired:
            _LOGGER.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
