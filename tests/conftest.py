# tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest

from tokenfolio.config.settings import get_settings
from tokenfolio.infrastructure.persistence.key_value_store import InMemoryKeyValueStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Backoff sleep that records delays and only yields to the loop."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer env vars and the settings cache out of tests."""
    for name in (
        "COINGECKO_BASE_URL",
        "COINGECKO_TIMEOUT_S",
        "COINGECKO_MAX_RETRIES",
        "COINGECKO_BASE_BACKOFF_S",
        "COINGECKO_MAX_BACKOFF_S",
        "TOKENFOLIO_CACHE_TTL_S",
        "TOKENFOLIO_DEFAULT_CURRENCY",
        "TOKENFOLIO_STATE_PATH",
        "TOKENFOLIO_DEDUPE_INFLIGHT",
        "TOKENFOLIO_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _market_row(asset_id: str, rank: int, price: float = 1.0) -> dict[str, object]:
    return {
        "id": asset_id,
        "symbol": asset_id[:3],
        "name": asset_id.capitalize(),
        "image": f"https://img.example/{asset_id}.png",
        "current_price": price,
        "market_cap": price * 1_000_000,
        "market_cap_rank": rank,
        "total_volume": price * 1_000,
        "price_change_percentage_24h": 1.5,
    }


def _detail_record(asset_id: str, prices: dict[str, float]) -> dict[str, object]:
    return {
        "id": asset_id,
        "symbol": asset_id[:3],
        "name": asset_id.capitalize(),
        "image": {"thumb": "t.png", "small": "s.png", "large": f"{asset_id}-large.png"},
        "market_data": {
            "current_price": prices,
            "market_cap": {k: v * 1_000_000 for k, v in prices.items()},
            "total_volume": {k: v * 1_000 for k, v in prices.items()},
            "ath": {k: v * 2 for k, v in prices.items()},
            "atl": {k: v / 2 for k, v in prices.items()},
            "circulating_supply": 19_000_000.0,
            "total_supply": 21_000_000.0,
            "max_supply": 21_000_000.0,
            "price_change_percentage_24h": -2.5,
            "price_change_percentage_7d": 4.0,
            "price_change_percentage_30d": 10.0,
        },
    }


@pytest.fixture
def make_market_row():
    """Factory for ``/coins/markets`` rows."""
    return _market_row


@pytest.fixture
def make_detail():
    """Factory for ``/coins/{id}`` records."""
    return _detail_record
