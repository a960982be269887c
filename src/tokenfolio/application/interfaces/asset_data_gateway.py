# src/tokenfolio/application/interfaces/asset_data_gateway.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Application-level Asset Data Gateway interface.

Synopsis:
    The only public surface of the fetch/cache/retry core. Services and the
    CLI depend on this protocol, not on ``CoinGeckoGateway`` directly.

Layer:
    application/interfaces
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from tokenfolio.domain.entities.asset import AssetDetail, AssetSummary, SearchResult


class AssetDataGateway(Protocol):
    """Read-only access to cryptocurrency market data."""

    async def list_top_assets(
        self,
        currency: str,
        limit: int = 50,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[AssetSummary]:
        """Return assets ordered by market capitalization, descending.

        Args:
            currency: Display currency code; not validated.
            limit: Page size (first page only).
            cancel: Optional token that stops a pending retry sequence.

        Raises:
            NetworkUnavailable: No response after the retry budget.
            RateLimited: HTTP 429 after the retry budget.
            UpstreamError: Any other non-2xx response or malformed payload.
        """
        ...

    async def get_asset_detail(
        self,
        asset_id: str,
        currency: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AssetDetail:
        """Return one asset's detail record including market data.

        Raises:
            InvalidArgument: ``asset_id`` is empty; no network call is made.
            NotFound: Upstream does not know ``asset_id``.
            NetworkUnavailable: No response after the retry budget.
            RateLimited: HTTP 429 after the retry budget.
            UpstreamError: Any other non-2xx response or malformed payload.
        """
        ...

    async def search_assets(
        self,
        query: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> SearchResult:
        """Free-text search; blank queries return an empty result immediately.

        Raises:
            NetworkUnavailable: No response after the retry budget.
            RateLimited: HTTP 429 after the retry budget.
            UpstreamError: Any other non-2xx response or malformed payload.
        """
        ...


__all__ = ["AssetDataGateway"]
