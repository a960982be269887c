# tests/unit/application/services/test_recently_viewed.py
from __future__ import annotations

import json
import logging

import pytest

from tokenfolio.application.services.recently_viewed import (
    RECENTLY_VIEWED_KEY,
    RecentlyViewedService,
)


def _summary(asset_id: str, price: float = 1.0) -> dict:
    return {"id": asset_id, "symbol": asset_id[:3], "name": asset_id.title(), "current_price": price}


def test_empty_history(kv_store) -> None:
    assert RecentlyViewedService(kv_store).list() == []


def test_add_puts_most_recent_first(kv_store) -> None:
    history = RecentlyViewedService(kv_store)
    history.add(_summary("bitcoin"))
    history.add(_summary("ethereum"))

    assert [i["id"] for i in history.list()] == ["ethereum", "bitcoin"]
    stored = json.loads(kv_store.get(RECENTLY_VIEWED_KEY))
    assert [i["id"] for i in stored] == ["ethereum", "bitcoin"]


def test_re_adding_moves_to_front_with_new_values(kv_store) -> None:
    history = RecentlyViewedService(kv_store)
    history.add(_summary("bitcoin", 1.0))
    history.add(_summary("ethereum"))
    history.add(_summary("bitcoin", 2.0))

    items = history.list()
    assert [i["id"] for i in items] == ["bitcoin", "ethereum"]
    assert items[0]["current_price"] == 2.0


def test_history_is_bounded(kv_store) -> None:
    history = RecentlyViewedService(kv_store, limit=3)
    for n in range(5):
        history.add(_summary(f"coin{n}"))

    assert [i["id"] for i in history.list()] == ["coin4", "coin3", "coin2"]


def test_default_limit_is_ten(kv_store) -> None:
    history = RecentlyViewedService(kv_store)
    for n in range(12):
        history.add(_summary(f"coin{n}"))
    assert len(history.list()) == 10


def test_remove_and_clear(kv_store) -> None:
    history = RecentlyViewedService(kv_store)
    history.add(_summary("bitcoin"))
    history.add(_summary("ethereum"))

    history.remove("bitcoin")
    history.remove("unknown")
    assert [i["id"] for i in history.list()] == ["ethereum"]

    history.clear()
    assert history.list() == []
    assert kv_store.get(RECENTLY_VIEWED_KEY) is None


def test_corrupt_value_reads_empty(kv_store, caplog: pytest.LogCaptureFixture) -> None:
    kv_store.set(RECENTLY_VIEWED_KEY, "[{broken")
    history = RecentlyViewedService(kv_store)

    with caplog.at_level(logging.ERROR):
        assert history.list() == []
    assert any(r.getMessage() == "recently_viewed.corrupt" for r in caplog.records)

    history.add(_summary("bitcoin"))
    assert [i["id"] for i in history.list()] == ["bitcoin"]


def test_non_list_and_invalid_entries_ignored(kv_store) -> None:
    kv_store.set(RECENTLY_VIEWED_KEY, json.dumps({"id": "bitcoin"}))
    assert RecentlyViewedService(kv_store).list() == []

    kv_store.set(RECENTLY_VIEWED_KEY, json.dumps([{"id": "bitcoin"}, "junk", {"name": "no id"}]))
    assert RecentlyViewedService(kv_store).list() == [{"id": "bitcoin"}]


def test_limit_must_be_positive(kv_store) -> None:
    with pytest.raises(ValueError):
        RecentlyViewedService(kv_store, limit=0)
