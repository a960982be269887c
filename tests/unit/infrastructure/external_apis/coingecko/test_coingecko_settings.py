# tests/unit/infrastructure/external_apis/coingecko/test_coingecko_settings.py
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tokenfolio.infrastructure.external_apis.coingecko.settings import CoinGeckoSettings


def test_defaults() -> None:
    s = CoinGeckoSettings()
    assert s.base_url == "https://api.coingecko.com/api/v3"
    assert s.timeout_s == 30.0
    assert s.max_retries == 3
    assert s.base_backoff_s == 1.0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COINGECKO_BASE_URL", "https://pro-api.example/api/v3")
    monkeypatch.setenv("COINGECKO_MAX_RETRIES", "5")
    monkeypatch.setenv("COINGECKO_TIMEOUT_S", "2.5")

    s = CoinGeckoSettings()

    assert s.base_url == "https://pro-api.example/api/v3"
    assert s.max_retries == 5
    assert s.timeout_s == 2.5


def test_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        CoinGeckoSettings(timeout_s=0)


def test_rejects_negative_retries() -> None:
    with pytest.raises(ValidationError):
        CoinGeckoSettings(max_retries=-1)
