# src/tokenfolio/dependencies/container.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the asset data core and user state.

Overview:
    Builds one fully wired object graph per process (or per test): transport
    client, an explicitly owned cache store, retry executor, optional
    in-flight de-duplication, the gateway, and the persisted user-state
    services.

Layer:
    dependencies

Design:
    * No module-level singletons: every container owns its own cache store,
      so tests and multiple gateways stay isolated.
    * Callers may inject an ``httpx.AsyncClient`` (e.g. under respx), a
      key/value store, a clock and a sleep function.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from tokenfolio.adapters.gateways.coingecko_gateway import CoinGeckoGateway
from tokenfolio.application.interfaces.key_value_store import KeyValueStore
from tokenfolio.application.services.currency_preference import CurrencyPreference
from tokenfolio.application.services.recently_viewed import RecentlyViewedService
from tokenfolio.application.use_cases.refresh_recently_viewed import RefreshRecentlyViewed
from tokenfolio.config.settings import Settings, get_settings
from tokenfolio.infrastructure.caching.memory_cache import InMemoryTTLCache
from tokenfolio.infrastructure.external_apis.coingecko.client import (
    CoinGeckoClient,
    is_transient_error,
)
from tokenfolio.infrastructure.external_apis.coingecko.settings import CoinGeckoSettings
from tokenfolio.infrastructure.persistence.key_value_store import JsonFileKeyValueStore
from tokenfolio.infrastructure.resilience.retry import RetryExecutor, RetryPolicy, Sleep
from tokenfolio.infrastructure.resilience.singleflight import InFlightRequests


@dataclass
class Container:
    """Wired application services."""

    settings: Settings
    client: CoinGeckoClient
    cache: InMemoryTTLCache
    gateway: CoinGeckoGateway
    history: RecentlyViewedService
    preference: CurrencyPreference
    refresher: RefreshRecentlyViewed

    async def aclose(self) -> None:
        await self.client.aclose()


def build_container(
    settings: Settings | None = None,
    *,
    coingecko: CoinGeckoSettings | None = None,
    http: httpx.AsyncClient | None = None,
    store: KeyValueStore | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Sleep | None = None,
) -> Container:
    """Build a :class:`Container` from settings.

    Args:
        settings: Application settings; ``get_settings()`` when omitted.
        coingecko: Transport settings; loaded from env when omitted.
        http: Optional shared HTTP client (not closed by the container).
        store: Persisted key/value store; a JSON file at
            ``settings.state_path`` when omitted.
        clock: Monotonic clock for the cache store.
        sleep: Backoff sleep for the retry executor.

    Returns:
        The wired container. Call :meth:`Container.aclose` when done.
    """
    app = settings or get_settings()
    cg = coingecko or CoinGeckoSettings()

    client = CoinGeckoClient(cg, http=http)
    cache = InMemoryTTLCache(ttl_s=app.cache_ttl_s, clock=clock)
    retry = RetryExecutor(
        retry_on=is_transient_error,
        policy=RetryPolicy(
            total=cg.max_retries,
            base=cg.base_backoff_s,
            cap=cg.max_backoff_s,
        ),
        sleep=sleep,
    )
    gateway = CoinGeckoGateway(
        client,
        cache,
        retry=retry,
        inflight=InFlightRequests() if app.dedupe_inflight else None,
    )

    kv = store or JsonFileKeyValueStore(app.state_path)
    history = RecentlyViewedService(kv, limit=app.recently_viewed_limit)
    preference = CurrencyPreference(kv, default=app.default_currency)

    return Container(
        settings=app,
        client=client,
        cache=cache,
        gateway=gateway,
        history=history,
        preference=preference,
        refresher=RefreshRecentlyViewed(gateway, history),
    )


@asynccontextmanager
async def open_container(
    settings: Settings | None = None,
    **kwargs: object,
) -> AsyncIterator[Container]:
    """Async context manager around :func:`build_container`."""
    container = build_container(settings, **kwargs)  # type: ignore[arg-type]
    try:
        yield container
    finally:
        await container.aclose()
