# src/tokenfolio/domain/services/asset_filter.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Local search over an already-fetched asset list (no network)."""

from __future__ import annotations

from collections.abc import Iterable

from tokenfolio.domain.entities.asset import AssetSummary

DEFAULT_FILTER_LIMIT = 10


def filter_assets(
    assets: Iterable[AssetSummary],
    query: str,
    *,
    limit: int = DEFAULT_FILTER_LIMIT,
) -> list[AssetSummary]:
    """Return assets whose name or symbol contains ``query`` (case-insensitive).

    Args:
        assets: Candidate assets, typically the current top list.
        query: Free-text query. Empty or whitespace-only yields no results.
        limit: Maximum number of matches returned, in input order.

    Returns:
        At most ``limit`` matching assets.
    """
    if not query.strip() or limit <= 0:
        return []

    needle = query.lower()
    matches: list[AssetSummary] = []
    for asset in assets:
        if needle in asset.get("name", "").lower() or needle in asset.get("symbol", "").lower():
            matches.append(asset)
            if len(matches) >= limit:
                break
    return matches
