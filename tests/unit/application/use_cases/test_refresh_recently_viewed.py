# tests/unit/application/use_cases/test_refresh_recently_viewed.py
from __future__ import annotations

import asyncio

import pytest

from tokenfolio.application.services.recently_viewed import RecentlyViewedService
from tokenfolio.application.use_cases.refresh_recently_viewed import RefreshRecentlyViewed
from tokenfolio.domain.exceptions.market_data import NetworkUnavailable


class _FakeGateway:
    """Serves detail records from a dict; listed ids fail."""

    def __init__(self, details: dict, *, failing: set[str] | None = None) -> None:
        self.details = details
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None

    async def get_asset_detail(self, asset_id: str, currency: str, *, cancel=None):
        self.calls.append((asset_id, currency))
        if self.gate is not None:
            await self.gate.wait()
        if asset_id in self.failing:
            raise NetworkUnavailable("offline")
        return self.details[asset_id]


def _seed(store, ids: list[str]) -> RecentlyViewedService:
    history = RecentlyViewedService(store)
    for asset_id in reversed(ids):
        history.add({"id": asset_id, "symbol": asset_id[:3], "name": asset_id, "current_price": 1.0})
    return history


@pytest.mark.asyncio
async def test_refresh_reprices_every_entry(kv_store, make_detail) -> None:
    history = _seed(kv_store, ["bitcoin", "ethereum"])
    gateway = _FakeGateway(
        {
            "bitcoin": make_detail("bitcoin", {"usd": 60_000.0, "eur": 55_000.0}),
            "ethereum": make_detail("ethereum", {"usd": 3_000.0, "eur": 2_700.0}),
        }
    )

    outcome = await RefreshRecentlyViewed(gateway, history).execute("eur")

    assert outcome.refreshed == 2 and outcome.failed == 0
    assert [i["id"] for i in outcome.items] == ["bitcoin", "ethereum"]
    assert [i["current_price"] for i in history.list()] == [55_000.0, 2_700.0]
    assert sorted(gateway.calls) == [("bitcoin", "eur"), ("ethereum", "eur")]


@pytest.mark.asyncio
async def test_start_returns_stale_items_immediately(kv_store, make_detail) -> None:
    history = _seed(kv_store, ["bitcoin"])
    gateway = _FakeGateway({"bitcoin": make_detail("bitcoin", {"gbp": 50_000.0})})
    gateway.gate = asyncio.Event()

    stale, task = RefreshRecentlyViewed(gateway, history).start("gbp")

    assert stale[0]["current_price"] == 1.0
    assert not task.done()
    gateway.gate.set()
    outcome = await task
    assert outcome.items[0]["current_price"] == 50_000.0


@pytest.mark.asyncio
async def test_failed_entries_keep_stale_values(kv_store, make_detail) -> None:
    history = _seed(kv_store, ["bitcoin", "ethereum"])
    gateway = _FakeGateway(
        {"bitcoin": make_detail("bitcoin", {"chf": 52_000.0})},
        failing={"ethereum"},
    )

    outcome = await RefreshRecentlyViewed(gateway, history).execute("chf")

    assert outcome.refreshed == 1 and outcome.failed == 1
    items = history.list()
    assert items[0]["current_price"] == 52_000.0
    assert items[1] == {"id": "ethereum", "symbol": "eth", "name": "ethereum", "current_price": 1.0}


@pytest.mark.asyncio
async def test_entries_removed_mid_refresh_stay_removed(kv_store, make_detail) -> None:
    history = _seed(kv_store, ["bitcoin", "ethereum"])
    gateway = _FakeGateway(
        {
            "bitcoin": make_detail("bitcoin", {"inr": 5_000_000.0}),
            "ethereum": make_detail("ethereum", {"inr": 250_000.0}),
        }
    )
    gateway.gate = asyncio.Event()

    _, task = RefreshRecentlyViewed(gateway, history).start("inr")
    await asyncio.sleep(0)
    history.remove("ethereum")
    gateway.gate.set()
    outcome = await task

    assert [i["id"] for i in outcome.items] == ["bitcoin"]
    assert [i["id"] for i in history.list()] == ["bitcoin"]


@pytest.mark.asyncio
async def test_empty_history_is_a_no_op(kv_store) -> None:
    gateway = _FakeGateway({})
    outcome = await RefreshRecentlyViewed(gateway, RecentlyViewedService(kv_store)).execute("eur")

    assert outcome.items == [] and outcome.refreshed == 0
    assert gateway.calls == []
