"""Trailing-edge debouncing on the running asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Set

from buffer_bridge.runtime import telemetry


class Debouncer:
    """Coalesce bursts of triggers into one call after a quiet window.

    Each ``trigger`` re-arms the timer, so only the last trigger of a burst
    runs. A call that has already started is never cancelled by a newer
    trigger; it finishes and the newer one runs after its own window.
    ``delay_ms=0`` disables coalescing: every trigger starts its own call.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        delay_ms: int,
        *,
        name: str = "debounce",
    ) -> None:
        self._callback = callback
        self.delay_ms = delay_ms
        self.name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self._inflight: Set[asyncio.Task[object]] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def running(self) -> bool:
        return bool(self._inflight)

    def trigger(self) -> None:
        if self.delay_ms <= 0:
            self._fire()
            return
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(
            self.delay_ms / 1000.0, self._fire
        )

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run a pending call now and wait for every in-flight call.

        Callback errors are logged by the debouncer and never raised here.
        """

        if self._handle is not None:
            self.cancel()
            self._fire()
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(self._callback())
        self._inflight.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: "asyncio.Task[object]") -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            telemetry.record_event(
                "debounce.error",
                level="error",
                data={"name": self.name, "error": repr(exc)},
                logger_name="buffer_bridge.sync",
            )


__all__ = ["Debouncer"]
