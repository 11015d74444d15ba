"""Translate editor change events into backend synchronization."""

from __future__ import annotations

from typing import Optional

from buffer_bridge.buffer import BufferSnapshot
from buffer_bridge.host.events import (
    BUFFER_ENTER,
    TEXT_CHANGED,
    TEXT_CHANGED_INSERT,
    EditorEventBus,
)
from buffer_bridge.host.protocols import BackendError, EditorHost, LanguageBackend
from buffer_bridge.runtime import telemetry

from .debounce import Debouncer
from .session import SessionContext

LOGGER_NAME = "buffer_bridge.sync"


class UpdateDispatcher:
    """Debounced handlers for the three change-event kinds.

    Handlers carry no parameters; cursor, lines and counters are read from the
    editor when the handler actually runs.
    """

    def __init__(
        self,
        session: SessionContext,
        editor: EditorHost,
        backend: LanguageBackend,
    ) -> None:
        self.session = session
        self.editor = editor
        self.backend = backend
        self.logger = telemetry.get_logger(LOGGER_NAME)
        config = session.config
        self._enter = Debouncer(
            self.sync_entered_buffer,
            config.buffer_enter_debounce_ms,
            name=BUFFER_ENTER,
        )
        self._changed = Debouncer(
            lambda: self.attempt_update(partial=False),
            config.text_changed_debounce_ms,
            name=TEXT_CHANGED,
        )
        self._changed_insert = Debouncer(
            lambda: self.attempt_update(partial=True),
            config.insert_debounce_ms,
            name=TEXT_CHANGED_INSERT,
        )
        self._bus: Optional[EditorEventBus] = None

    # -- event entry points ------------------------------------------------

    def on_buffer_entered(self, _payload: object | None = None) -> None:
        self._enter.trigger()

    def on_text_changed(self, _payload: object | None = None) -> None:
        self._changed.trigger()

    def on_text_changed_insert(self, _payload: object | None = None) -> None:
        self._changed_insert.trigger()

    def bind(self, bus: EditorEventBus) -> None:
        bus.subscribe(BUFFER_ENTER, self.on_buffer_entered)
        bus.subscribe(TEXT_CHANGED, self.on_text_changed)
        bus.subscribe(TEXT_CHANGED_INSERT, self.on_text_changed_insert)
        self._bus = bus

    def unbind(self) -> None:
        if self._bus is None:
            return
        self._bus.unsubscribe(BUFFER_ENTER, self.on_buffer_entered)
        self._bus.unsubscribe(TEXT_CHANGED, self.on_text_changed)
        self._bus.unsubscribe(TEXT_CHANGED_INSERT, self.on_text_changed_insert)
        self._bus = None

    async def flush(self) -> None:
        """Run every pending debounced handler now and wait for them."""

        for debouncer in (self._enter, self._changed, self._changed_insert):
            await debouncer.flush()

    def cancel(self) -> None:
        for debouncer in (self._enter, self._changed, self._changed_insert):
            debouncer.cancel()

    # -- synchronization ---------------------------------------------------

    async def sync_entered_buffer(self) -> None:
        """Adopt the active buffer's identity and push it in full.

        There is no revision check here: the revision is reset to the sentinel
        so the next change is always treated as new. A closed gate delays the
        push until the transaction finishes instead of dropping it.
        """

        cwd, file, filetype = await self.editor.identity()
        async with self.session.gate.sync_slot(wait_if_closed=True):
            self.session.state.reset(cwd=cwd, file=file, filetype=filetype)
            telemetry.record_event(
                "sync.buffer_enter",
                data={"file": file, "filetype": filetype},
                logger_name=LOGGER_NAME,
            )
            snapshot = await self._snapshot(partial=False)
        await self._send(snapshot, partial=False)

    async def attempt_update(self, *, partial: bool) -> bool:
        """Sync if the gate is open and the buffer moved past the last revision.

        Returns whether anything was sent. Skips are expected races, not
        errors, and are only logged at debug level. Only the editor reads
        happen inside the gate slot; the backend is awaited after it is
        released so a slow backend never holds up a transaction.
        """

        async with self.session.gate.sync_slot() as allowed:
            if not allowed:
                self.logger.debug(f"sync skipped: gate closed (partial={partial})")
                return False
            tick = await self.editor.changed_tick()
            if not self.session.tracker.should_sync(tick):
                self.logger.debug(f"sync skipped: revision {tick} already seen")
                return False
            snapshot = await self._snapshot(partial=partial)
        return await self._send(snapshot, partial=partial)

    async def _snapshot(self, *, partial: bool) -> BufferSnapshot:
        state = self.session.state
        line, column = await self.editor.cursor()
        if partial:
            content = (await self.editor.current_line(),)
        else:
            content = tuple(await self.editor.lines())
        return BufferSnapshot(
            filetype=state.filetype,
            file=state.file,
            cwd=state.cwd,
            revision=state.revision,
            line=line,
            column=column,
            buffer=content,
        )

    async def _send(self, snapshot: BufferSnapshot, *, partial: bool) -> bool:
        try:
            if partial:
                await self.backend.partial_sync(snapshot)
            else:
                await self.backend.full_sync(snapshot)
        except BackendError as exc:
            telemetry.record_event(
                "sync.failed",
                level="warning",
                data={
                    "file": snapshot.file,
                    "revision": snapshot.revision,
                    "error": str(exc),
                },
                logger_name=LOGGER_NAME,
            )
            return False
        telemetry.record_event(
            "sync.partial" if partial else "sync.full",
            level="debug",
            data={
                "file": snapshot.file,
                "revision": snapshot.revision,
                "lines": len(snapshot.buffer),
            },
            logger_name=LOGGER_NAME,
        )
        return True


__all__ = ["UpdateDispatcher"]
