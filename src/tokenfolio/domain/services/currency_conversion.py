# src/tokenfolio/domain/services/currency_conversion.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Currency-unit conversion for asset details.

Synopsis:
    Asset detail records carry per-currency maps (``current_price``,
    ``market_cap``, ``total_volume``, ...). These helpers pick the figures for
    one display currency and fold a detail record into the flat summary shape
    stored in the recently viewed history.

Layer:
    domain/services
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tokenfolio.domain.entities.asset import AssetDetail, AssetSummary


def amount_in(per_currency: Mapping[str, Any] | None, currency: str) -> float:
    """Return the amount quoted in ``currency`` from a per-currency map.

    Missing maps, missing currencies and ``null`` amounts all resolve to ``0.0``.
    """
    if not per_currency:
        return 0.0
    value = per_currency.get(currency.lower())
    if value is None:
        return 0.0
    return float(value)


def summary_from_detail(detail: AssetDetail, currency: str) -> AssetSummary:
    """Build a summary record from a detail record for one display currency.

    Args:
        detail: Asset detail as returned by the gateway.
        currency: Display currency code (e.g. ``"eur"``).

    Returns:
        A new summary; the detail record is not modified.
    """
    market: Mapping[str, Any] = detail.get("market_data") or {}
    image: Mapping[str, Any] = detail.get("image") or {}

    summary: AssetSummary = {
        "id": detail["id"],
        "symbol": detail.get("symbol", ""),
        "name": detail.get("name", ""),
        "image": str(image.get("large", "")),
        "current_price": amount_in(market.get("current_price"), currency),
        "market_cap": amount_in(market.get("market_cap"), currency),
        "total_volume": amount_in(market.get("total_volume"), currency),
        "price_change_percentage_24h": float(market.get("price_change_percentage_24h") or 0.0),
        "circulating_supply": float(market.get("circulating_supply") or 0.0),
        "total_supply": market.get("total_supply"),
        "max_supply": market.get("max_supply"),
    }
    return summary
