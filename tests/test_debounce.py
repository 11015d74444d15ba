from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List

import pytest

from buffer_bridge.sync import Debouncer


def make_counter() -> tuple[List[int], Callable[[], Awaitable[None]]]:
    calls: List[int] = []

    async def callback() -> None:
        calls.append(len(calls) + 1)

    return calls, callback


@pytest.mark.asyncio
async def test_burst_coalesces_into_one_call() -> None:
    calls, callback = make_counter()
    debouncer = Debouncer(callback, 20, name="burst")

    for _ in range(5):
        debouncer.trigger()
    assert debouncer.pending
    await asyncio.sleep(0.08)
    await debouncer.flush()

    assert calls == [1]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_zero_delay_fires_every_trigger() -> None:
    calls, callback = make_counter()
    debouncer = Debouncer(callback, 0)

    debouncer.trigger()
    debouncer.trigger()
    await debouncer.flush()

    assert calls == [1, 2]


@pytest.mark.asyncio
async def test_cancel_drops_pending_call() -> None:
    calls, callback = make_counter()
    debouncer = Debouncer(callback, 20)

    debouncer.trigger()
    debouncer.cancel()
    await asyncio.sleep(0.05)

    assert calls == []


@pytest.mark.asyncio
async def test_flush_runs_pending_immediately() -> None:
    calls, callback = make_counter()
    debouncer = Debouncer(callback, 10_000)

    debouncer.trigger()
    await debouncer.flush()

    assert calls == [1]


@pytest.mark.asyncio
async def test_inflight_call_survives_new_trigger() -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    finished: List[str] = []

    async def slow() -> None:
        started.set()
        await release.wait()
        finished.append("done")

    debouncer = Debouncer(slow, 5)
    debouncer.trigger()
    await started.wait()
    assert debouncer.running

    debouncer.trigger()
    release.set()
    await asyncio.sleep(0.03)
    await debouncer.flush()

    assert finished == ["done", "done"]


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_debouncer() -> None:
    calls: List[str] = []

    async def flaky() -> None:
        calls.append("x")
        raise RuntimeError("backend down")

    debouncer = Debouncer(flaky, 0)
    debouncer.trigger()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    debouncer.trigger()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert calls == ["x", "x"]
    assert not debouncer.running


@pytest.mark.asyncio
async def test_flush_does_not_reraise_logged_errors() -> None:
    async def broken() -> None:
        raise RuntimeError("backend down")

    debouncer = Debouncer(broken, 10_000)
    debouncer.trigger()

    await debouncer.flush()

    assert not debouncer.pending
    assert not debouncer.running
