# src/tokenfolio/infrastructure/caching/memory_cache.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""In-memory TTL cache.

Synopsis:
    Process-local implementation of :class:`CachePort`. Each instance is
    explicitly constructed and handed to the gateway that owns it; there is no
    module-level cache.

Design:
    * One immutable :class:`CacheEntry` per key; ``set`` replaces it.
    * Freshness is ``now - stored_at < ttl``; stale entries stay in memory
      and read as misses until overwritten.
    * No size bound and no LRU. Keys are low-cardinality (one per
      currency/limit/id/query combination actually requested).
    * No locking: a ``get`` followed by a ``set`` is not atomic and concurrent
      identical misses both write (last writer wins).

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final

from tokenfolio.application.interfaces.cache_port import CachePort

__all__ = ["CacheEntry", "InMemoryTTLCache", "TTL_ASSET_DATA_S"]

#: Freshness window for every asset data response (5 minutes).
TTL_ASSET_DATA_S: Final[float] = 300.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached response and the monotonic time it was stored."""

    key: str
    payload: Any
    stored_at: float


class InMemoryTTLCache(CachePort):
    """Dictionary-backed cache with a single fixed TTL."""

    def __init__(
        self,
        *,
        ttl_s: float = TTL_ASSET_DATA_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_s: Time-to-live in seconds, fixed for the lifetime of the store.
            clock: Monotonic time source; injectable for tests.
        """
        if ttl_s < 0:
            raise ValueError("ttl_s must be >= 0")
        self._ttl = float(ttl_s)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_s(self) -> float:
        """Configured time-to-live in seconds."""
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return the payload for ``key`` if fresh, else ``None``."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at < self._ttl:
            return entry.payload
        return None

    def set(self, key: str, payload: Any) -> None:
        """Replace the entry for ``key`` with a freshly timestamped one."""
        self._entries[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())

    def entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for ``key`` regardless of freshness."""
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)
