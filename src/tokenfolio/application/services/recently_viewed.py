# src/tokenfolio/application/services/recently_viewed.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Recently viewed asset history.

Synopsis:
    Most-recent-first list of asset summaries persisted as a JSON array in a
    :class:`KeyValueStore` under :data:`RECENTLY_VIEWED_KEY`.

Design:
    * Viewing an asset already in the list moves it to the front.
    * The list is truncated to ``limit`` entries (10 by default).
    * A corrupt persisted value is logged and read as an empty history; it
      is overwritten on the next write.

Layer:
    application/services
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Final

from tokenfolio.application.interfaces.key_value_store import KeyValueStore
from tokenfolio.domain.entities.asset import AssetSummary
from tokenfolio.infrastructure.logging.logger import get_json_logger

log = get_json_logger(__name__)

RECENTLY_VIEWED_KEY: Final[str] = "recentlyViewed"
DEFAULT_HISTORY_LIMIT: Final[int] = 10


class RecentlyViewedService:
    """Persisted, bounded, most-recent-first history of viewed assets."""

    def __init__(self, store: KeyValueStore, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._store = store
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    def list(self) -> list[AssetSummary]:
        """Return the history, most recent first."""
        raw = self._store.get(RECENTLY_VIEWED_KEY)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            log.error("recently_viewed.corrupt", extra={"error": str(exc)})
            return []
        if not isinstance(items, list):
            log.error("recently_viewed.corrupt", extra={"error": "expected a JSON array"})
            return []
        return [item for item in items if isinstance(item, dict) and "id" in item]

    def add(self, summary: AssetSummary) -> list[AssetSummary]:
        """Put ``summary`` at the front, dropping any older entry with its id."""
        rest = [item for item in self.list() if item["id"] != summary["id"]]
        return self.replace([summary, *rest])

    def remove(self, asset_id: str) -> list[AssetSummary]:
        """Drop the entry with ``asset_id``; unknown ids are ignored."""
        return self.replace(item for item in self.list() if item["id"] != asset_id)

    def replace(self, items: Iterable[AssetSummary]) -> list[AssetSummary]:
        """Persist ``items`` (truncated to the limit) as the whole history."""
        kept = list(items)[: self._limit]
        self._store.set(RECENTLY_VIEWED_KEY, json.dumps(kept, ensure_ascii=False))
        return kept

    def clear(self) -> None:
        self._store.delete(RECENTLY_VIEWED_KEY)
