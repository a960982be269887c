# src/tokenfolio/application/interfaces/key_value_store.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Application Interface: persisted key/value store.

Synopsis:
    String-to-string store that survives across sessions (the role browser
    ``localStorage`` plays for a web front-end). Services serialize their own
    values.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Persisted string key/value store."""

    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` when absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
