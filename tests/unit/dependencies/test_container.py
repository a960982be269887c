# tests/unit/dependencies/test_container.py
from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest
import respx

from tokenfolio.config.settings import Settings
from tokenfolio.dependencies.container import build_container, open_container
from tokenfolio.domain.exceptions.market_data import NetworkUnavailable
from tokenfolio.infrastructure.external_apis.coingecko.settings import CoinGeckoSettings
from tokenfolio.infrastructure.persistence.key_value_store import JsonFileKeyValueStore


def test_each_container_owns_its_cache(tmp_path: Path, kv_store) -> None:
    settings = Settings(state_path=tmp_path / "s.json", cache_ttl_s=42)
    a = build_container(settings, store=kv_store)
    b = build_container(settings, store=kv_store)

    assert a.cache is not b.cache
    assert a.cache.ttl_s == 42.0


def test_default_store_is_json_file_at_state_path(tmp_path: Path) -> None:
    container = build_container(Settings(state_path=tmp_path / "s.json", default_currency="chf"))

    container.preference.set("eur")

    assert JsonFileKeyValueStore(tmp_path / "s.json").get("currency") == "eur"
    fresh = build_container(Settings(state_path=tmp_path / "other.json", default_currency="chf"))
    assert fresh.preference.get() == "chf"


@pytest.mark.asyncio
async def test_open_container_wires_retry_from_provider_settings(
    tmp_path: Path, kv_store, sleeper
) -> None:
    cg = CoinGeckoSettings(max_retries=1, base_backoff_s=0.25)
    with respx.mock:
        route = respx.get("https://api.coingecko.com/api/v3/coins/markets").mock(
            side_effect=httpx.ConnectError
        )
        async with open_container(
            Settings(state_path=tmp_path / "s.json"), coingecko=cg, store=kv_store, sleep=sleeper
        ) as container:
            with pytest.raises(NetworkUnavailable):
                await container.gateway.list_top_assets("usd", 5)

    assert route.call_count == 2
    assert sleeper.delays == [0.25]


@pytest.mark.asyncio
async def test_dedupe_flag_enables_shared_loads(tmp_path: Path, kv_store, make_market_row) -> None:
    settings = Settings(state_path=tmp_path / "s.json", dedupe_inflight=True)
    with respx.mock:
        route = respx.get("https://api.coingecko.com/api/v3/coins/markets").mock(
            return_value=httpx.Response(200, json=[make_market_row("bitcoin", 1)])
        )
        async with open_container(settings, store=kv_store) as container:
            await asyncio.gather(
                container.gateway.list_top_assets("usd", 5),
                container.gateway.list_top_assets("usd", 5),
            )

    assert route.call_count == 1
