# tests/unit/config/test_settings.py
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tokenfolio.config.settings import Environment, Settings, get_settings


def test_defaults() -> None:
    s = Settings()
    assert s.environment is Environment.DEVELOPMENT
    assert s.cache_ttl_s == 300.0
    assert s.default_currency == "usd"
    assert s.top_assets_limit == 50
    assert s.recently_viewed_limit == 10
    assert s.dedupe_inflight is False
    assert s.state_path == Path("~/.tokenfolio/state.json")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TOKENFOLIO_CACHE_TTL_S", "60")
    monkeypatch.setenv("TOKENFOLIO_DEFAULT_CURRENCY", " EUR ")
    monkeypatch.setenv("TOKENFOLIO_STATE_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("TOKENFOLIO_DEDUPE_INFLIGHT", "true")

    s = Settings()

    assert s.cache_ttl_s == 60.0
    assert s.default_currency == "eur"
    assert s.state_path == tmp_path / "s.json"
    assert s.dedupe_inflight is True


def test_unsupported_default_currency_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(default_currency="xyz")


def test_negative_ttl_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(cache_ttl_s=-1)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_get_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOKENFOLIO_TOP_ASSETS_LIMIT", "0")
    get_settings.cache_clear()
    with pytest.raises(RuntimeError, match="Invalid TokenFolio configuration"):
        get_settings()
