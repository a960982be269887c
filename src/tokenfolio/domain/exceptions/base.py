# src/tokenfolio/domain/exceptions/base.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Base Domain Exceptions.

Summary:
    Canonical base class for domain/application exceptions so that every
    surface (CLI, future view controllers) can map failures deterministically.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain/application exceptions.

    Attributes:
        code:
            Stable error code suitable for logging and metrics labels.
        user_hint:
            Coarse classification of what a user can do about the failure
            (``"retry_later"``, ``"check_identifier"`` or ``"generic"``).
        details:
            Optional machine-readable diagnostic payload used by adapters and
            logging code.
    """

    code: str = "DOMAIN_ERROR"
    user_hint: str = "generic"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        """Initialize a DomainError instance.

        Args:
            message:
                Human-readable error message, safe to show to end users.
            details:
                Optional structured diagnostic payload for logs.
        """
        super().__init__(message)
        self.details: dict[str, Any] = details or {}
