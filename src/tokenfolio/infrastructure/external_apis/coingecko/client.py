# src/tokenfolio/infrastructure/external_apis/coingecko/client.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""CoinGecko Transport Client (v3) - async, instrumented, single attempt.

This transport performs exactly one HTTP attempt per call; retries, caching
and error-taxonomy mapping are the gateway's job. It provides:

* Async HTTP (httpx) with a per-attempt timeout.
* Raw failure signalling:
    - ``httpx.TransportError`` when no response was received (connect
      errors, timeouts, dropped connections).
    - ``httpx.HTTPStatusError`` for any non-2xx response.
    - :class:`MalformedResponse` when the body is not JSON or not the
      expected top-level shape.
* Prometheus status/latency metrics.

Use :func:`is_transient_error` as the retry predicate for these failures.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final
from urllib.parse import quote

import httpx

from tokenfolio.domain.entities.asset import AssetDetail, AssetSummary, SearchResult
from tokenfolio.infrastructure.external_apis.coingecko.settings import CoinGeckoSettings
from tokenfolio.infrastructure.logging.logger import get_json_logger
from tokenfolio.infrastructure.observability.metrics import (
    observe_upstream_request,
    record_http_status,
)

log = get_json_logger(__name__)

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
}

#: Endpoint labels used for metrics and logs.
ENDPOINT_MARKETS: Final[str] = "coins_markets"
ENDPOINT_COIN: Final[str] = "coin_detail"
ENDPOINT_SEARCH: Final[str] = "search"


class MalformedResponse(ValueError):
    """The upstream answered 2xx but the body could not be used."""


def is_transient_error(exc: Exception) -> bool:
    """Return True for failures worth retrying.

    Transient: no response was received at all, or the service answered
    HTTP 429. Everything else (other 4xx, 5xx, malformed bodies) is terminal.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429
    return isinstance(exc, httpx.TransportError)


def failure_reason(exc: Exception) -> str:
    """Short, label-safe reason for a raw transport failure."""
    if isinstance(exc, httpx.HTTPStatusError):
        return "rate_limited" if exc.response.status_code == 429 else f"http_{exc.response.status_code}"
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, httpx.TransportError):
        return "network"
    if isinstance(exc, MalformedResponse):
        return "malformed"
    return type(exc).__name__


class CoinGeckoClient:
    """Transport client for the CoinGecko public API (no auth)."""

    def __init__(
        self,
        settings: CoinGeckoSettings | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Provider settings; defaults are loaded from env if omitted.
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
            timeout_s: Optional per-attempt timeout override in seconds.
        """
        self._settings = settings or CoinGeckoSettings()
        self._base_url = str(self._settings.base_url).rstrip("/")
        self._timeout = float(timeout_s if timeout_s is not None else self._settings.timeout_s)

        # Per-request headers; a shared client's headers are never modified.
        self._headers = {**_DEFAULT_HEADERS, "User-Agent": self._settings.user_agent}
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(timeout=self._timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    # ---------------------------- Public API ----------------------------- #

    async def coins_markets(self, *, vs_currency: str, per_page: int) -> list[AssetSummary]:
        """Call ``/coins/markets`` for the first page ordered by market cap.

        Raises:
            MalformedResponse: If the body is not a JSON list.
        """
        params = {
            "vs_currency": vs_currency,
            "order": "market_cap_desc",
            "per_page": per_page,
            "page": 1,
            "sparkline": False,
        }
        payload = await self._get_json(ENDPOINT_MARKETS, "/coins/markets", params)
        if not isinstance(payload, list):
            raise MalformedResponse("bad_shape: expected list")
        return payload

    async def coin(self, coin_id: str) -> AssetDetail:
        """Call ``/coins/{id}`` with market data only.

        Raises:
            MalformedResponse: If the body is not a JSON object.
        """
        params = {
            "localization": False,
            "tickers": False,
            "market_data": True,
            "community_data": False,
            "developer_data": False,
            "sparkline": False,
        }
        path = f"/coins/{quote(coin_id, safe='')}"
        payload = await self._get_json(ENDPOINT_COIN, path, params)
        if not isinstance(payload, Mapping):
            raise MalformedResponse("bad_shape: expected object")
        return payload  # type: ignore[return-value]

    async def search(self, query: str) -> SearchResult:
        """Call ``/search``.

        Raises:
            MalformedResponse: If the body has no ``coins`` list.
        """
        payload = await self._get_json(ENDPOINT_SEARCH, "/search", {"query": query})
        if not isinstance(payload, Mapping) or not isinstance(payload.get("coins"), list):
            raise MalformedResponse("bad_shape: expected object with coins:list")
        return payload  # type: ignore[return-value]

    # --------------------------- Internal helpers ------------------------- #

    async def _get_json(self, endpoint: str, path: str, params: Mapping[str, Any]) -> Any:
        """Perform one GET and decode the JSON body."""
        url = f"{self._base_url}{path}"
        with observe_upstream_request(endpoint=endpoint):
            response = await self._client.get(
                url, params=params, headers=self._headers, timeout=self._timeout
            )
            record_http_status(endpoint, response.status_code)
            log.debug(
                "upstream.response",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            response.raise_for_status()
            try:
                return response.json()
            except ValueError as exc:
                raise MalformedResponse(f"non_json: {exc}") from exc
