# src/tokenfolio/infrastructure/observability/metrics.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for upstream calls and the response cache.

Exports
-------
* ``tokenfolio_upstream_latency_seconds`` (Histogram; endpoint, outcome)
* ``tokenfolio_upstream_http_status_total`` (Counter; endpoint, status_code)
* ``tokenfolio_upstream_retries_total`` (Counter; endpoint, reason)
* ``tokenfolio_upstream_errors_total`` (Counter; endpoint, reason)
* ``tokenfolio_cache_lookups_total`` (Counter; operation, result)

Helpers:

* :func:`observe_upstream_request` - context manager timing one upstream call.
* ``get_*`` accessors returning the underlying collectors.

Design
------
Collectors are created against the *current* default registry
(:data:`prometheus_client.REGISTRY`). If a collector with the same name is
already registered there, it is reused instead of registering a duplicate, so
module re-imports and registry swaps in tests are safe. Recording a sample
never raises into the caller.
"""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from time import perf_counter
from typing import TypeVar

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

_C = TypeVar("_C", Counter, Histogram)


def _get_or_create(
    kind: type[_C],
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> _C:
    """Return a collector of ``kind`` bound to the current default registry.

    1. Reuse an existing collector registered under ``name``.
    2. Otherwise register a new one.
    3. If a concurrent registration raced us (``Duplicated timeseries``),
       look the collector up again and reuse it.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    existing = mapping.get(name)
    if isinstance(existing, kind):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return kind(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, kind):
                return again
        raise


upstream_latency_seconds: Histogram = _get_or_create(
    Histogram,
    "tokenfolio_upstream_latency_seconds",
    "Latency of single upstream HTTP attempts (seconds).",
    labelnames=("endpoint", "outcome"),
)

upstream_http_status_total: Counter = _get_or_create(
    Counter,
    "tokenfolio_upstream_http_status_total",
    "HTTP status codes returned by the upstream market data service.",
    labelnames=("endpoint", "status_code"),
)

upstream_retries_total: Counter = _get_or_create(
    Counter,
    "tokenfolio_upstream_retries_total",
    "Retries scheduled for upstream requests.",
    labelnames=("endpoint", "reason"),
)

upstream_errors_total: Counter = _get_or_create(
    Counter,
    "tokenfolio_upstream_errors_total",
    "Errors surfaced by the gateway after retries.",
    labelnames=("endpoint", "reason"),
)

cache_lookups_total: Counter = _get_or_create(
    Counter,
    "tokenfolio_cache_lookups_total",
    "Gateway cache lookups by outcome.",
    labelnames=("operation", "result"),
)


@dataclass
class UpstreamObservation:
    """State captured while observing one upstream attempt.

    Attributes:
        endpoint: Logical endpoint name (for labelling).
        start: Monotonic start time in seconds.
        outcome: ``"success"`` or ``"error"``.
    """

    endpoint: str
    start: float = field(default_factory=perf_counter)
    outcome: str = "success"

    def mark_error(self) -> None:
        self.outcome = "error"


@contextmanager
def observe_upstream_request(*, endpoint: str) -> Generator[UpstreamObservation, None, None]:
    """Record the latency of one upstream attempt.

    Exceptions raised inside the block mark the observation as an error and
    are re-raised unchanged.

    Args:
        endpoint: Logical endpoint name (e.g. ``"coins_markets"``).

    Yields:
        A mutable :class:`UpstreamObservation`.
    """
    obs = UpstreamObservation(endpoint=endpoint)
    try:
        yield obs
    except Exception:
        obs.mark_error()
        raise
    finally:
        with suppress(Exception):
            upstream_latency_seconds.labels(
                endpoint=obs.endpoint,
                outcome=obs.outcome,
            ).observe(perf_counter() - obs.start)


def record_http_status(endpoint: str, status_code: int) -> None:
    """Count one upstream HTTP status (best effort)."""
    with suppress(Exception):
        upstream_http_status_total.labels(endpoint=endpoint, status_code=str(status_code)).inc()


def record_retry(endpoint: str, reason: str) -> None:
    """Count one scheduled retry (best effort)."""
    with suppress(Exception):
        upstream_retries_total.labels(endpoint=endpoint, reason=reason).inc()


def record_error(endpoint: str, reason: str) -> None:
    """Count one error surfaced to callers (best effort)."""
    with suppress(Exception):
        upstream_errors_total.labels(endpoint=endpoint, reason=reason).inc()


def record_cache_lookup(operation: str, *, hit: bool) -> None:
    """Count one cache lookup (best effort)."""
    with suppress(Exception):
        cache_lookups_total.labels(operation=operation, result="hit" if hit else "miss").inc()


def get_upstream_latency_seconds() -> Histogram:
    """Return the upstream latency histogram."""
    return upstream_latency_seconds


def get_cache_lookups_total() -> Counter:
    """Return the cache lookup counter."""
    return cache_lookups_total
