# src/tokenfolio/infrastructure/resilience/singleflight.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""In-flight request de-duplication (process-local single-flight).

Concurrent callers asking for the same key while a load is pending share that
load's outcome instead of issuing their own. Keys should be built exactly like
cache keys. The entry is dropped as soon as the load completes, so a later
miss starts a fresh load.

The shared load belongs to no single caller. A caller's cancel token only
stops that caller's wait; the load keeps running for everyone else.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tokenfolio.infrastructure.resilience.retry import RetryCancelled

T = TypeVar("T")


class InFlightRequests:
    """Map of cache key to the task currently loading it."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future[Any]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    async def run(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> T:
        """Await the pending load for ``key``, starting one if none exists.

        Args:
            key: De-duplication key.
            loader: Zero-arg coroutine factory; must not depend on any one
                caller's cancel token.
            cancel: Optional token that abandons this caller's wait.

        Raises:
            RetryCancelled: ``cancel`` was set before or while waiting.
            Exception: Whatever the shared load raised; failures propagate to
                every waiter.
        """
        if cancel is not None and cancel.is_set():
            raise RetryCancelled(0)

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(loader())
            self._pending[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))

        shared = asyncio.shield(task)
        if cancel is None:
            return await shared

        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({shared, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not waiter.done():
                waiter.cancel()
        if shared in done:
            return shared.result()
        shared.cancel()
        raise RetryCancelled(0)

    def _forget(self, key: str, task: asyncio.Future[Any]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
