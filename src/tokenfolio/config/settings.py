# src/tokenfolio/config/settings.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""TokenFolio Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration. Only the dependency wiring
    and the CLI read it; the gateway, cache and services receive plain
    values through their constructors.

Design:
    - Pydantic v2 BaseSettings with the ``TOKENFOLIO_`` env prefix.
    - Explicit field declarations with constrained ranges.
    - Singleton accessor ``get_settings()`` with LRU cache.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenfolio.domain.enums.currency import DEFAULT_CURRENCY, is_supported_currency
from tokenfolio.infrastructure.caching.memory_cache import TTL_ASSET_DATA_S

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical runtime environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for TokenFolio."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical runtime environment.",
    )
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g. 'DEBUG'). Falls back to LOG_LEVEL or INFO.",
    )
    cache_ttl_s: float = Field(
        default=TTL_ASSET_DATA_S,
        ge=0,
        le=24 * 60 * 60,
        description="Freshness window for cached asset data, fixed per process.",
    )
    default_currency: str = Field(
        default=DEFAULT_CURRENCY,
        description="Display currency used until the user picks one.",
    )
    top_assets_limit: int = Field(
        default=50,
        ge=1,
        le=250,
        description="Page size for the top assets listing.",
    )
    recently_viewed_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of entries kept in the recently viewed history.",
    )
    state_path: Path = Field(
        default=Path("~/.tokenfolio/state.json"),
        description="JSON file holding persisted user state (currency, history).",
    )
    dedupe_inflight: bool = Field(
        default=False,
        description="Collapse concurrent identical cache misses into one upstream call.",
    )

    model_config = SettingsConfigDict(
        env_prefix="TOKENFOLIO_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("default_currency")
    @classmethod
    def _check_default_currency(cls, value: str) -> str:
        """Normalize and validate the default display currency."""
        normalized = value.strip().lower()
        if not is_supported_currency(normalized):
            raise ValueError(f"unsupported default currency: {value!r}")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.error("Invalid configuration", extra={"errors": exc.errors()})
        raise RuntimeError("Invalid TokenFolio configuration") from exc
    logger.debug(
        "Settings initialized",
        extra={
            "environment": settings.environment.value,
            "cache_ttl_s": settings.cache_ttl_s,
            "dedupe_inflight": settings.dedupe_inflight,
        },
    )
    return settings
