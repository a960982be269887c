# src/tokenfolio/domain/entities/asset.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Asset records.

Summary:
    Typed, JSON-shaped snapshots of the remote service's responses. The gateway
    passes these through untouched; field semantics belong to the upstream
    contract. Only the fields the application reads are declared.
"""
from __future__ import annotations

from typing import NotRequired, TypedDict


class AssetSummary(TypedDict):
    """One row of ``/coins/markets`` (also the shape kept in recent history)."""

    id: str
    symbol: str
    name: str
    image: NotRequired[str]
    current_price: NotRequired[float | None]
    market_cap: NotRequired[float | None]
    market_cap_rank: NotRequired[int | None]
    total_volume: NotRequired[float | None]
    high_24h: NotRequired[float | None]
    low_24h: NotRequired[float | None]
    price_change_percentage_24h: NotRequired[float | None]
    circulating_supply: NotRequired[float | None]
    total_supply: NotRequired[float | None]
    max_supply: NotRequired[float | None]
    last_updated: NotRequired[str | None]


class AssetImage(TypedDict, total=False):
    thumb: str
    small: str
    large: str


class AssetMarketData(TypedDict, total=False):
    current_price: dict[str, float]
    market_cap: dict[str, float]
    total_volume: dict[str, float]
    ath: dict[str, float]
    atl: dict[str, float]
    circulating_supply: float | None
    total_supply: float | None
    max_supply: float | None
    price_change_percentage_24h: float | None
    price_change_percentage_7d: float | None
    price_change_percentage_30d: float | None


class AssetDetail(TypedDict):
    """Response of ``/coins/{id}`` with market data included."""

    id: str
    symbol: str
    name: str
    image: NotRequired[AssetImage]
    description: NotRequired[dict[str, str]]
    links: NotRequired[dict[str, object]]
    categories: NotRequired[list[str]]
    market_data: NotRequired[AssetMarketData]


class SearchHit(TypedDict):
    id: str
    name: str
    symbol: str
    market_cap_rank: int | None


class SearchResult(TypedDict):
    """Response of ``/search``; only ``coins`` is consumed."""

    coins: list[SearchHit]


def empty_search_result() -> SearchResult:
    """Return a fresh, empty search result."""
    return {"coins": []}
