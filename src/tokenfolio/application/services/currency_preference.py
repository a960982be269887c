# src/tokenfolio/application/services/currency_preference.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Persisted display-currency preference."""

from __future__ import annotations

from typing import Final

from tokenfolio.application.interfaces.key_value_store import KeyValueStore
from tokenfolio.domain.enums.currency import DEFAULT_CURRENCY

CURRENCY_KEY: Final[str] = "currency"


class CurrencyPreference:
    """Reads and writes the user's display currency.

    Values are stored as given; validation against the recognized currency
    set is the caller's responsibility.
    """

    def __init__(self, store: KeyValueStore, *, default: str = DEFAULT_CURRENCY) -> None:
        self._store = store
        self._default = default

    def get(self) -> str:
        return self._store.get(CURRENCY_KEY) or self._default

    def set(self, currency: str) -> str:
        """Persist ``currency`` and return the previous value."""
        previous = self.get()
        self._store.set(CURRENCY_KEY, currency)
        return previous
