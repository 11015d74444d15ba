"""Editor event names and a minimal synchronous event bus."""

from __future__ import annotations

import asyncio
from typing import Callable, Dict

BUFFER_ENTER = "buffer.enter"
TEXT_CHANGED = "text.changed"
TEXT_CHANGED_INSERT = "text.changed_insert"
INSERT_ENTER = "insert.enter"
INSERT_LEAVE = "insert.leave"

CHANGE_EVENTS = (BUFFER_ENTER, TEXT_CHANGED, TEXT_CHANGED_INSERT)


class EditorEventBus:
    """Fan-out of editor notifications to subscribers.

    Payloads are informational only; handlers re-read editor state when they
    run because a debounced handler may fire long after the event.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)

    async def wait_for(self, event: str) -> object | None:
        """Suspend until ``event`` is next emitted and return its payload."""

        future: asyncio.Future[object | None] = (
            asyncio.get_running_loop().create_future()
        )

        def _resolve(payload: object) -> None:
            if not future.done():
                future.set_result(payload)

        self.subscribe(event, _resolve)
        try:
            return await future
        finally:
            self.unsubscribe(event, _resolve)


__all__ = [
    "BUFFER_ENTER",
    "CHANGE_EVENTS",
    "INSERT_ENTER",
    "INSERT_LEAVE",
    "TEXT_CHANGED",
    "TEXT_CHANGED_INSERT",
    "EditorEventBus",
]
