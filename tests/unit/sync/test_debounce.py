"""Unit tests for the debounced order push."""

from __future__ import annotations

import asyncio

import pytest

from cuelock.core.sync import DEFAULT_PUSH_DEBOUNCE_MS, OrderChangeNotifier


class _Recorder:
    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail

    async def __call__(self) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("store down")


def test_default_delay() -> None:
    assert OrderChangeNotifier(_Recorder()).delay_ms == DEFAULT_PUSH_DEBOUNCE_MS == 250


@pytest.mark.asyncio
async def test_burst_is_coalesced_into_one_push() -> None:
    """Many changes inside the quiet period push once."""
    push = _Recorder()
    notifier = OrderChangeNotifier(push, delay_ms=20)

    for _ in range(5):
        notifier.order_changed()
        await asyncio.sleep(0.001)
    await notifier.flush()

    assert push.calls == 1
    assert notifier.pending is False


@pytest.mark.asyncio
async def test_separate_bursts_push_separately() -> None:
    push = _Recorder()
    notifier = OrderChangeNotifier(push, delay_ms=5)

    notifier.order_changed()
    await notifier.flush()
    notifier.order_changed()
    await notifier.flush()

    assert push.calls == 2


@pytest.mark.asyncio
async def test_nothing_pushed_before_delay() -> None:
    push = _Recorder()
    notifier = OrderChangeNotifier(push, delay_ms=1000)

    notifier.order_changed()
    await asyncio.sleep(0.01)

    assert push.calls == 0
    assert notifier.pending is True
    notifier.cancel()


@pytest.mark.asyncio
async def test_cancel_drops_pending_push() -> None:
    push = _Recorder()
    notifier = OrderChangeNotifier(push, delay_ms=10)

    notifier.order_changed()
    notifier.cancel()
    await asyncio.sleep(0.03)
    await notifier.flush()

    assert push.calls == 0
    assert notifier.pending is False


@pytest.mark.asyncio
async def test_push_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    notifier = OrderChangeNotifier(_Recorder(fail=True), delay_ms=0)

    notifier.order_changed()
    await notifier.flush()

    assert "Order push failed" in caplog.text


@pytest.mark.asyncio
async def test_flush_without_pending_push() -> None:
    await OrderChangeNotifier(_Recorder()).flush()


class _SlowPush:
    """Push that takes a while, recording when each call starts and ends."""

    def __init__(self, duration: float) -> None:
        self.duration = duration
        self.started: list[int] = []
        self.finished: list[int] = []
        self.running = 0
        self.max_running = 0

    async def __call__(self) -> None:
        n = len(self.started) + 1
        self.started.append(n)
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        await asyncio.sleep(self.duration)
        self.running -= 1
        self.finished.append(n)


@pytest.mark.asyncio
async def test_change_during_push_does_not_abort_it() -> None:
    """A push already writing completes; the new change gets its own push."""
    push = _SlowPush(duration=0.05)
    notifier = OrderChangeNotifier(push, delay_ms=10)

    notifier.order_changed()
    await asyncio.sleep(0.03)
    assert push.started == [1]

    notifier.order_changed()
    await notifier.flush()

    assert push.finished == [1, 2]
    assert push.max_running == 1
    assert notifier.pending is False


@pytest.mark.asyncio
async def test_cancel_leaves_running_push_alone() -> None:
    push = _SlowPush(duration=0.03)
    notifier = OrderChangeNotifier(push, delay_ms=0)

    notifier.order_changed()
    await asyncio.sleep(0.01)
    notifier.cancel()
    assert notifier.pending is True
    await notifier.flush()

    assert push.finished == [1]
