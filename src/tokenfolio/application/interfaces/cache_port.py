# src/tokenfolio/application/interfaces/cache_port.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Port.

Synopsis:
    Minimal time-bounded key/value cache consumed by the asset data gateway.
    Enables swapping the in-process store for another implementation and
    injecting a fresh store per test.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Cache with TTL semantics.

    Implementations own every stored entry. A write always replaces the entry
    for its key wholesale; entries older than the TTL read as misses.
    """

    def get(self, key: str) -> Any | None:
        """Return the payload stored under ``key`` if still fresh, else ``None``."""

    def set(self, key: str, payload: Any) -> None:
        """Store ``payload`` under ``key`` with a fresh timestamp."""
