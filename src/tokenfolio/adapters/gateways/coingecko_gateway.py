# src/tokenfolio/adapters/gateways/coingecko_gateway.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: CoinGecko -> cached, retried asset data.

Every operation follows the same template:

1. Build a deterministic cache key from the operation name and parameters.
2. Return the cached payload on a fresh hit.
3. On a miss, run the single-attempt transport call under the retry executor.
4. On success, store the payload (replacing any stale entry) and return it.
5. On failure, map the raw error into the domain taxonomy and raise it.
   Failed attempts never write to the cache.

The gateway holds no state of its own between calls; the cache it is given
is the only shared resource. Payloads are passed through uninterpreted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from tokenfolio.application.interfaces.asset_data_gateway import AssetDataGateway
from tokenfolio.application.interfaces.cache_port import CachePort
from tokenfolio.domain.entities.asset import (
    AssetDetail,
    AssetSummary,
    SearchResult,
    empty_search_result,
)
from tokenfolio.domain.exceptions.base import DomainError
from tokenfolio.domain.exceptions.market_data import (
    InvalidArgument,
    NetworkUnavailable,
    NotFound,
    RateLimited,
    UpstreamError,
)
from tokenfolio.infrastructure.external_apis.coingecko.client import (
    ENDPOINT_COIN,
    ENDPOINT_MARKETS,
    ENDPOINT_SEARCH,
    CoinGeckoClient,
    MalformedResponse,
    failure_reason,
    is_transient_error,
)
from tokenfolio.infrastructure.logging.logger import get_json_logger
from tokenfolio.infrastructure.observability.metrics import (
    record_cache_lookup,
    record_error,
    record_retry,
)
from tokenfolio.infrastructure.resilience.retry import RetryCancelled, RetryExecutor
from tokenfolio.infrastructure.resilience.singleflight import InFlightRequests

T = TypeVar("T")

log = get_json_logger(__name__)

DEFAULT_TOP_LIMIT = 50


def top_assets_key(currency: str, limit: int) -> str:
    """Cache key for :meth:`CoinGeckoGateway.list_top_assets`."""
    return f"topAssets:{currency}:{limit}"


def asset_detail_key(asset_id: str, currency: str) -> str:
    """Cache key for :meth:`CoinGeckoGateway.get_asset_detail`."""
    return f"assetDetail:{asset_id}:{currency}"


def search_key(query: str) -> str:
    """Cache key for :meth:`CoinGeckoGateway.search_assets` (lower-cased query)."""
    return f"search:{query.lower()}"


class CoinGeckoGateway(AssetDataGateway):
    """Asset data gateway over the CoinGecko public API."""

    def __init__(
        self,
        client: CoinGeckoClient,
        cache: CachePort,
        *,
        retry: RetryExecutor | None = None,
        inflight: InFlightRequests | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Single-attempt transport.
            cache: Cache store owned by the caller; may be shared between
                gateways deliberately, never implicitly.
            retry: Retry executor; defaults to 3 retries with 1s/2s/4s backoff
                classifying failures with :func:`is_transient_error`.
            inflight: Optional de-duplication map. When given, concurrent
                identical cache misses share one upstream call. The shared
                call runs without a cancel token; a caller's ``cancel`` only
                abandons its own wait.
        """
        self._client = client
        self._cache = cache
        self._retry = retry or RetryExecutor(retry_on=is_transient_error)
        self._inflight = inflight

    # --------------------------------------------------------------------- #
    # Operations
    # --------------------------------------------------------------------- #
    async def list_top_assets(
        self,
        currency: str,
        limit: int = DEFAULT_TOP_LIMIT,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[AssetSummary]:
        """Return the first page of assets ordered by market cap, descending."""
        return await self._read_through(
            endpoint=ENDPOINT_MARKETS,
            key=top_assets_key(currency, limit),
            call=lambda: self._client.coins_markets(vs_currency=currency, per_page=limit),
            cancel=cancel,
        )

    async def get_asset_detail(
        self,
        asset_id: str,
        currency: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AssetDetail:
        """Return one asset's detail record.

        Raises:
            InvalidArgument: ``asset_id`` is empty or blank; raised before any
                cache or network access.
        """
        if not asset_id or not asset_id.strip():
            raise InvalidArgument("Asset id must not be empty.", details={"field": "asset_id"})
        return await self._read_through(
            endpoint=ENDPOINT_COIN,
            key=asset_detail_key(asset_id, currency),
            call=lambda: self._client.coin(asset_id),
            cancel=cancel,
        )

    async def search_assets(
        self,
        query: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> SearchResult:
        """Search assets by free text.

        Blank queries resolve to an empty result without touching the cache
        or the network. The cache key is the lower-cased query while the
        upstream receives it verbatim.
        """
        if not query or not query.strip():
            return empty_search_result()
        return await self._read_through(
            endpoint=ENDPOINT_SEARCH,
            key=search_key(query),
            call=lambda: self._client.search(query),
            cancel=cancel,
        )

    # --------------------------------------------------------------------- #
    # Private helpers
    # --------------------------------------------------------------------- #
    async def _read_through(
        self,
        *,
        endpoint: str,
        key: str,
        call: Callable[[], Awaitable[T]],
        cancel: asyncio.Event | None,
    ) -> T:
        cached = self._cache.get(key)
        if cached is not None:
            record_cache_lookup(endpoint, hit=True)
            log.debug("cache.hit", extra={"key": key})
            return cached
        record_cache_lookup(endpoint, hit=False)
        log.debug("cache.miss", extra={"key": key})

        if self._inflight is None:
            return await self._load(endpoint=endpoint, key=key, call=call, cancel=cancel)
        return await self._inflight.run(
            key,
            lambda: self._load(endpoint=endpoint, key=key, call=call, cancel=None),
            cancel=cancel,
        )

    async def _load(
        self,
        *,
        endpoint: str,
        key: str,
        call: Callable[[], Awaitable[T]],
        cancel: asyncio.Event | None,
    ) -> T:
        def _on_retry(retry_number: int, delay: float, exc: Exception) -> None:
            reason = failure_reason(exc)
            record_retry(endpoint, reason)
            log.warning(
                "upstream.retry_scheduled",
                extra={
                    "endpoint": endpoint,
                    "retry": retry_number,
                    "delay_s": delay,
                    "reason": reason,
                },
            )

        try:
            payload = await self._retry.execute(call, cancel=cancel, on_retry=_on_retry)
        except RetryCancelled:
            log.info("upstream.cancelled", extra={"endpoint": endpoint, "key": key})
            raise
        except Exception as exc:
            mapped = self._map_error(endpoint, exc)
            record_error(endpoint, mapped.code.lower())
            log.warning(
                "upstream.failed",
                extra={"endpoint": endpoint, "code": mapped.code, "reason": failure_reason(exc)},
            )
            if mapped is exc:
                raise
            raise mapped from exc

        self._cache.set(key, payload)
        return payload

    @staticmethod
    def _map_error(endpoint: str, exc: Exception) -> DomainError:
        """Translate a raw transport failure into the gateway's error taxonomy."""
        if isinstance(exc, DomainError):
            return exc
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            details: dict[str, Any] = {"status": status, "endpoint": endpoint}
            if status == 429:
                return RateLimited(
                    "The data provider is rate limiting requests; wait a minute and try again.",
                    details=details,
                )
            if status == 404 and endpoint == ENDPOINT_COIN:
                return NotFound("No asset exists with that identifier.", details=details)
            return UpstreamError(f"Upstream responded with HTTP {status}.", details=details)
        if isinstance(exc, httpx.TransportError):
            return NetworkUnavailable(
                "Could not reach the market data service.",
                details={"endpoint": endpoint, "error": type(exc).__name__},
            )
        if isinstance(exc, MalformedResponse):
            return UpstreamError(
                "Upstream returned an unreadable payload.",
                details={"endpoint": endpoint, "error": str(exc)},
            )
        return UpstreamError(
            "Unexpected failure while fetching market data.",
            details={"endpoint": endpoint, "error": type(exc).__name__},
        )


__all__ = [
    "CoinGeckoGateway",
    "DEFAULT_TOP_LIMIT",
    "asset_detail_key",
    "search_key",
    "top_assets_key",
]
