# src/tokenfolio/infrastructure/resilience/retry.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Retry utilities (async) with exponential backoff.

The delay before retry ``n`` (1-based) is ``base * 2**(n - 1)``, capped at
``cap``; with the defaults that is 1s, 2s, 4s. Only failures accepted by the
``retry_on`` predicate are retried; everything else propagates at once.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

#: Retries after the first attempt.
MAX_RETRIES = 3
#: Backoff base in seconds.
BASE_DELAY_S = 1.0

Sleep = Callable[[float], Awaitable[None]]
OnRetry = Callable[[int, float, Exception], None]


class RetryCancelled(Exception):
    """The retry sequence was stopped through its cancel token."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"retry cancelled after {attempts} attempt(s)")
        self.attempts = attempts


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry attempts."""

    total: int = MAX_RETRIES  # number of retries (not counting the first attempt)
    base: float = BASE_DELAY_S  # base backoff seconds
    cap: float = 60.0  # max backoff seconds
    jitter: bool = False  # full jitter if True

    def backoff(self, attempt: int) -> float:
        """Return the delay after the zero-based ``attempt`` failed."""
        delay = min(self.cap, self.base * (2**attempt))
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay


async def _pause(delay: float, sleep: Sleep, cancel: asyncio.Event | None, attempts: int) -> None:
    """Sleep for ``delay`` seconds, waking early if ``cancel`` is set."""
    if cancel is None:
        await sleep(delay)
        return

    sleeper = asyncio.ensure_future(sleep(delay))
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleeper, waiter):
            if not task.done():
                task.cancel()
    if waiter in done:
        raise RetryCancelled(attempts)


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: Callable[[Exception], bool],
    sleep: Sleep | None = None,
    cancel: asyncio.Event | None = None,
    on_retry: OnRetry | None = None,
) -> T:
    """Retry an async function with backoff until success or budget exhausted.

    Args:
        fn: Zero-arg async function to execute.
        policy: RetryPolicy defining count/backoff.
        retry_on: Predicate that returns True when an exception is transient.
        sleep: Awaitable sleep used for backoff; defaults to ``asyncio.sleep``.
        cancel: Optional token checked before each attempt and during backoff.
        on_retry: Optional hook called with ``(retry_number, delay, exc)``
            before each backoff wait.

    Returns:
        The return value of ``fn`` if successful.

    Raises:
        RetryCancelled: If ``cancel`` was set before or between attempts.
        Exception: The last exception from ``fn`` if it is terminal or the
            retry budget is exhausted.
    """
    pause = sleep or asyncio.sleep
    attempt = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise RetryCancelled(attempt)
        try:
            return await fn()
        except Exception as exc:
            if attempt >= policy.total or not retry_on(exc):
                raise
            delay = policy.backoff(attempt)
            if on_retry is not None:
                on_retry(attempt + 1, delay, exc)
        await _pause(delay, pause, cancel, attempt + 1)
        attempt += 1


class RetryExecutor:
    """Bind a policy, a transient-error classifier and a sleep function."""

    def __init__(
        self,
        *,
        retry_on: Callable[[Exception], bool],
        policy: RetryPolicy | None = None,
        sleep: Sleep | None = None,
        on_retry: OnRetry | None = None,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._retry_on = retry_on
        self._sleep = sleep
        self._on_retry = on_retry

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        cancel: asyncio.Event | None = None,
        on_retry: OnRetry | None = None,
    ) -> T:
        """Run ``operation`` under this executor's policy.

        ``on_retry`` overrides the executor-level hook for this call.
        """
        return await retry_async(
            operation,
            policy=self._policy,
            retry_on=self._retry_on,
            sleep=self._sleep,
            cancel=cancel,
            on_retry=on_retry or self._on_retry,
        )
