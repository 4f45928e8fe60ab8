"""Debounced persistence of order changes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PUSH_DEBOUNCE_MS = 250


class OrderChangeNotifier:
    """Coalesce bursts of order changes into one push.

    Every ``order_changed()`` call restarts the quiet period; the push runs
    once no further change arrived for ``delay_ms``. Only the quiet period is
    ever cancelled: a push that has started always runs to completion, and
    pushes run one at a time in the order they were scheduled. Must be used
    from inside a running event loop.

    Args:
        push: Coroutine function performing the write
        delay_ms: Quiet period before pushing
    """

    def __init__(
        self,
        push: Callable[[], Awaitable[Any]],
        *,
        delay_ms: int = DEFAULT_PUSH_DEBOUNCE_MS,
    ) -> None:
        self._push = push
        self.delay_ms = delay_ms
        self._timer: asyncio.Task[None] | None = None
        self._pushes: set[asyncio.Task[None]] = set()
        self._push_lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        """True while a push is scheduled or running."""
        if self._timer is not None and not self._timer.done():
            return True
        return any(not task.done() for task in self._pushes)

    def order_changed(self) -> None:
        """Schedule a push, superseding any push still waiting out its delay."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_push())

    async def _wait_then_push(self) -> None:
        await asyncio.sleep(self.delay_ms / 1000)
        task = asyncio.get_running_loop().create_task(self._run_push())
        self._pushes.add(task)
        task.add_done_callback(self._pushes.discard)

    async def _run_push(self) -> None:
        async with self._push_lock:
            try:
                await self._push()
            except Exception:
                # Runs detached from any caller; report instead of losing it.
                logger.exception("Order push failed")

    async def flush(self) -> None:
        """Wait for the scheduled push and any push still running."""
        timer = self._timer
        if timer is not None and not timer.done():
            try:
                await timer
            except asyncio.CancelledError:
                if not timer.cancelled():
                    raise
        pushes = [task for task in self._pushes if not task.done()]
        if pushes:
            await asyncio.gather(*pushes)

    def cancel(self) -> None:
        """Drop a push still waiting out its delay. A running push is left alone."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
