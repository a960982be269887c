# src/tokenfolio/domain/enums/currency.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Display currencies recognized by the application.

The gateway builds cache keys from whatever currency string it is given and
never validates it; validation belongs to the caller (see the CLI).
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class DisplayCurrency(str, Enum):
    """Quote currencies a user can select for prices and market caps."""

    USD = "usd"
    EUR = "eur"
    GBP = "gbp"
    CHF = "chf"
    INR = "inr"


AVAILABLE_CURRENCIES: Final[tuple[str, ...]] = tuple(c.value for c in DisplayCurrency)

DEFAULT_CURRENCY: Final[str] = DisplayCurrency.USD.value


def is_supported_currency(value: str) -> bool:
    """Return True if ``value`` is one of :data:`AVAILABLE_CURRENCIES`."""
    return value in AVAILABLE_CURRENCIES
