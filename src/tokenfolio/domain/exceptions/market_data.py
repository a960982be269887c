# src/tokenfolio/domain/exceptions/market_data.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Market Data Domain Exceptions.

Synopsis:
    The fixed error taxonomy surfaced by the asset data gateway. Raw transport
    failures are re-mapped into exactly one of these before they leave the
    gateway.

Design:
    * Inherit from :class:`DomainError` for a consistent ``.code``.
    * ``user_hint`` separates "try again later" conditions from "fix the
      identifier" conditions from generic failures.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from tokenfolio.domain.exceptions.base import DomainError


class MarketDataError(DomainError):
    """Base class for failures talking to the remote market data service."""

    code = "MARKET_DATA_ERROR"


class NetworkUnavailable(MarketDataError):
    """No response was received from the remote service.

    Raised only after the retry budget for connectivity failures is exhausted.
    """

    code = "NETWORK_UNAVAILABLE"
    user_hint = "retry_later"


class RateLimited(MarketDataError):
    """The remote service answered HTTP 429 on every attempt.

    Raised only after the retry budget is exhausted; callers should wait
    before trying again.
    """

    code = "RATE_LIMITED"
    user_hint = "retry_later"


class NotFound(MarketDataError):
    """The requested asset does not exist upstream (HTTP 404 on detail lookup)."""

    code = "NOT_FOUND"
    user_hint = "check_identifier"


class UpstreamError(MarketDataError):
    """Any other non-2xx response, or a payload that could not be decoded."""

    code = "UPSTREAM_ERROR"


class InvalidArgument(DomainError):
    """A precondition failed before any network call was attempted."""

    code = "INVALID_ARGUMENT"
    user_hint = "check_identifier"


__all__ = [
    "InvalidArgument",
    "MarketDataError",
    "NetworkUnavailable",
    "NotFound",
    "RateLimited",
    "UpstreamError",
]
