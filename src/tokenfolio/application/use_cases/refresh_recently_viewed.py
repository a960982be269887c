# src/tokenfolio/application/use_cases/refresh_recently_viewed.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""
Use Case: Refresh Recently Viewed

Purpose:
    Stale-while-revalidate update of the recently viewed history after the
    display currency changes. Callers get the current (stale) entries right
    away; a background task re-fetches every entry's detail in the new
    currency through the gateway (cache + retry apply) and writes the
    refreshed history back.

Rules:
    * Entries are refreshed concurrently; the written history keeps the order
      the history has when the refresh finishes.
    * An entry whose refresh fails keeps its stale values.
    * Entries removed while the refresh was in flight are not written back.

Layer: application/use_cases
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from tokenfolio.application.interfaces.asset_data_gateway import AssetDataGateway
from tokenfolio.application.services.recently_viewed import RecentlyViewedService
from tokenfolio.domain.entities.asset import AssetSummary
from tokenfolio.domain.exceptions.base import DomainError
from tokenfolio.domain.services.currency_conversion import summary_from_detail
from tokenfolio.infrastructure.logging.logger import get_json_logger

log = get_json_logger(__name__)


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of one refresh pass."""

    currency: str
    items: list[AssetSummary]
    refreshed: int
    failed: int


class RefreshRecentlyViewed:
    """Re-price the recently viewed history in a new display currency.

    Args:
        gateway: Asset data gateway used for detail lookups.
        history: Recently viewed history to read and rewrite.
    """

    def __init__(self, gateway: AssetDataGateway, history: RecentlyViewedService) -> None:
        self._gateway = gateway
        self._history = history

    def start(self, currency: str) -> tuple[list[AssetSummary], asyncio.Task[RefreshOutcome]]:
        """Return the stale history now and schedule its refresh.

        Must be called from a running event loop.

        Returns:
            ``(stale_items, task)``; awaiting ``task`` yields the outcome.
        """
        stale = self._history.list()
        task = asyncio.ensure_future(self.execute(currency, snapshot=stale))
        return stale, task

    async def execute(
        self,
        currency: str,
        *,
        snapshot: list[AssetSummary] | None = None,
    ) -> RefreshOutcome:
        """Refresh every entry of ``snapshot`` (default: current history)."""
        items = self._history.list() if snapshot is None else snapshot
        if not items:
            return RefreshOutcome(currency=currency, items=[], refreshed=0, failed=0)

        results = await asyncio.gather(*(self._refresh_one(item, currency) for item in items))
        fresh = {summary["id"]: summary for summary in results if summary is not None}

        merged = [fresh.get(item["id"], item) for item in self._history.list()]
        written = self._history.replace(merged)
        failed = len(items) - len(fresh)
        log.info(
            "recently_viewed.refreshed",
            extra={"currency": currency, "refreshed": len(fresh), "failed": failed},
        )
        return RefreshOutcome(currency=currency, items=written, refreshed=len(fresh), failed=failed)

    async def _refresh_one(self, item: AssetSummary, currency: str) -> AssetSummary | None:
        try:
            detail = await self._gateway.get_asset_detail(item["id"], currency)
        except DomainError as exc:
            log.warning(
                "recently_viewed.refresh_failed",
                extra={"asset_id": item["id"], "currency": currency, "code": exc.code},
            )
            return None
        return summary_from_detail(detail, currency)
