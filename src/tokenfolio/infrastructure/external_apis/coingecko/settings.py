# src/tokenfolio/infrastructure/external_apis/coingecko/settings.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the CoinGecko transport client."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoinGeckoSettings(BaseSettings):
    """Configuration for the CoinGecko v3 client.

    Environment variables (with ``model_config.env_prefix``):

    * ``COINGECKO_BASE_URL``
    * ``COINGECKO_TIMEOUT_S``
    * ``COINGECKO_MAX_RETRIES``
    * ``COINGECKO_BASE_BACKOFF_S``
    * ``COINGECKO_MAX_BACKOFF_S``
    * ``COINGECKO_USER_AGENT``
    """

    base_url: str = Field(
        "https://api.coingecko.com/api/v3",
        description="Base URL for the CoinGecko public API.",
    )
    timeout_s: float = Field(
        30.0,
        gt=0,
        le=300.0,
        description="Per-attempt timeout in seconds.",
    )
    max_retries: int = Field(
        3,
        ge=0,
        le=10,
        description="Retries after the first attempt for transient failures.",
    )
    base_backoff_s: float = Field(
        1.0,
        ge=0,
        description="Backoff base; retry n waits base * 2**(n-1) seconds.",
    )
    max_backoff_s: float = Field(
        60.0,
        ge=0,
        description="Upper bound for a single backoff wait.",
    )
    user_agent: str = Field(
        "tokenfolio/0.1",
        description="User-Agent header sent with every request.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="COINGECKO_",
        extra="ignore",
    )
