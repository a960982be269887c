# tests/unit/infrastructure/persistence/test_key_value_store.py
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tokenfolio.infrastructure.persistence.key_value_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)


def test_in_memory_store_roundtrip() -> None:
    store = InMemoryKeyValueStore({"currency": "eur"})
    assert store.get("currency") == "eur"
    store.set("currency", "gbp")
    assert store.get("currency") == "gbp"
    store.delete("currency")
    store.delete("currency")  # deleting twice is fine
    assert store.get("currency") is None


def test_json_file_missing_reads_empty(tmp_path: Path) -> None:
    store = JsonFileKeyValueStore(tmp_path / "state.json")
    assert store.get("currency") is None


def test_json_file_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    JsonFileKeyValueStore(path).set("currency", "chf")

    assert JsonFileKeyValueStore(path).get("currency") == "chf"
    assert json.loads(path.read_text(encoding="utf-8")) == {"currency": "chf"}


def test_json_file_delete_keeps_other_keys(tmp_path: Path) -> None:
    store = JsonFileKeyValueStore(tmp_path / "state.json")
    store.set("currency", "eur")
    store.set("recentlyViewed", "[]")
    store.delete("currency")

    assert store.get("currency") is None
    assert store.get("recentlyViewed") == "[]"


def test_json_file_corrupt_reads_empty_and_is_replaced(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    with caplog.at_level(logging.ERROR):
        assert store.get("currency") is None
    assert any(r.getMessage() == "state_file.corrupt" for r in caplog.records)

    store.set("currency", "inr")
    assert json.loads(path.read_text(encoding="utf-8")) == {"currency": "inr"}


def test_json_file_non_object_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileKeyValueStore(path).get("currency") is None


def test_json_file_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    store = JsonFileKeyValueStore("~/state.json")
    assert store.path == tmp_path / "state.json"
