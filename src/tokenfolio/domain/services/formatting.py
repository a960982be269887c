# src/tokenfolio/domain/services/formatting.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Display formatting for money and percentages."""

from __future__ import annotations

from typing import Final

CURRENCY_SYMBOLS: Final[dict[str, str]] = {
    "usd": "$",
    "eur": "€",
    "gbp": "£",
    "chf": "CHF ",
    "inr": "₹",
}

_COMPACT_STEPS: Final[tuple[tuple[float, str], ...]] = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)

NOT_AVAILABLE: Final[str] = "N/A"


def _symbol(currency: str) -> str:
    code = currency.lower()
    return CURRENCY_SYMBOLS.get(code, f"{code.upper()} ")


def format_currency(amount: float | None, currency: str) -> str:
    """Format an amount with 2 to 6 fraction digits and a currency symbol.

    Examples:
        ``format_currency(1234.5, "usd") == "$1,234.50"``
        ``format_currency(0.000123, "eur") == "€0.000123"``
    """
    if amount is None:
        return NOT_AVAILABLE
    whole, _, frac = f"{abs(amount):,.6f}".rstrip("0").partition(".")
    sign = "-" if amount < 0 else ""
    return f"{sign}{_symbol(currency)}{whole}.{frac.ljust(2, '0')}"


def format_compact(amount: float | None, currency: str) -> str:
    """Format large amounts with a K/M/B/T suffix (e.g. ``"$1.23T"``)."""
    if amount is None:
        return NOT_AVAILABLE
    sign = "-" if amount < 0 else ""
    magnitude = abs(amount)
    for threshold, suffix in _COMPACT_STEPS:
        if magnitude >= threshold:
            return f"{sign}{_symbol(currency)}{magnitude / threshold:.2f}{suffix}"
    return f"{sign}{_symbol(currency)}{magnitude:.2f}"


def format_percentage(percentage: float | None) -> str:
    """Format a percentage change with an explicit sign for non-negative values."""
    if percentage is None:
        return NOT_AVAILABLE
    prefix = "+" if percentage >= 0 else ""
    return f"{prefix}{percentage:.2f}%"
