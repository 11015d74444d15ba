"""In-process editor host backed by ``Buffer`` objects.

``InMemoryEditor`` implements both ``EditorHost`` and ``DocumentSource`` and
emits the same change events a real editor integration would. The Textual
demo drives it from key presses; tests drive it directly.
"""

from __future__ import annotations

import asyncio
import os
from collections import deque
from typing import Deque, Dict, Optional, Sequence, Tuple

from buffer_bridge.buffer import Buffer, Cursor
from buffer_bridge.runtime import telemetry

from .events import (
    BUFFER_ENTER,
    INSERT_ENTER,
    INSERT_LEAVE,
    TEXT_CHANGED,
    TEXT_CHANGED_INSERT,
    EditorEventBus,
)
from .protocols import OpenDocument

LOGGER_NAME = "buffer_bridge.host"


class InMemoryEditor:
    """Multi-buffer editor state with one active buffer."""

    def __init__(self, *, cwd: str = ".", bus: Optional[EditorEventBus] = None) -> None:
        self.cwd = os.path.abspath(cwd)
        self.bus = bus or EditorEventBus()
        self._buffers: Dict[str, Buffer] = {}
        self._active: Optional[str] = None
        self._scripted_input: Deque[str] = deque()

    # -- buffer management -------------------------------------------------

    def resolve(self, path: str) -> str:
        return os.path.normpath(os.path.join(self.cwd, path))

    def open(self, path: str, text: str = "", *, filetype: str = "") -> Buffer:
        """Open (or re-enter) ``path`` and make it the active buffer."""

        key = self.resolve(path)
        if key not in self._buffers:
            self._buffers[key] = Buffer.from_text(text, path=path, filetype=filetype)
        self.switch_to(path)
        return self._buffers[key]

    def switch_to(self, path: str) -> None:
        key = self.resolve(path)
        if key not in self._buffers:
            raise KeyError(f"No open buffer for '{path}'")
        self._active = key
        telemetry.record_event(
            "editor.buffer_enter", data={"path": path}, logger_name=LOGGER_NAME
        )
        self.bus.emit(BUFFER_ENTER, path)

    @property
    def buffer(self) -> Buffer:
        if self._active is None:
            raise RuntimeError("No active buffer")
        return self._buffers[self._active]

    # -- user actions ------------------------------------------------------

    def enter_insert(self) -> None:
        self.buffer.begin_insert()
        self.bus.emit(INSERT_ENTER, self.buffer.path)

    def type_text(self, text: str) -> None:
        self.buffer.insert_text(text)
        self.bus.emit(TEXT_CHANGED_INSERT, text)

    def backspace(self) -> None:
        self.buffer.backspace()
        self.bus.emit(TEXT_CHANGED_INSERT, None)

    def leave_insert(self) -> str:
        typed = self.buffer.end_insert()
        self.bus.emit(INSERT_LEAVE, typed)
        return typed

    def move_cursor(self, lines: int = 0, columns: int = 0) -> Cursor:
        line, column = self.buffer.state.cursor
        return self.buffer.set_cursor(line + lines, column + columns)

    def delete_current_line(self) -> None:
        self.buffer.delete_line(self.buffer.state.cursor[0])
        self.buffer.set_cursor(*self.buffer.state.cursor)
        self._changed()

    def undo(self) -> bool:
        undone = self.buffer.undo()
        if undone:
            self._changed()
        return undone

    def save(self) -> None:
        self.buffer.document.mark_saved()

    def queue_input(self, text: str) -> None:
        """Script the text a user types on the next ``capture_input``."""

        self._scripted_input.append(text)

    # -- EditorHost ----------------------------------------------------------

    async def identity(self) -> Tuple[str, str, str]:
        buffer = self.buffer
        return (self.cwd, buffer.path, buffer.filetype)

    async def cursor(self) -> Cursor:
        return self.buffer.state.cursor

    async def set_cursor(self, line: int, column: int) -> None:
        self.buffer.set_cursor(line, column)

    async def changed_tick(self) -> int:
        return self.buffer.changed_tick

    async def current_line(self) -> str:
        return self.buffer.current_line()

    async def lines(self) -> Sequence[str]:
        return self.buffer.lines()

    async def delete_line(self, line: int) -> None:
        self.buffer.delete_line(line)
        self._changed()

    async def set_line(self, line: int, value: Sequence[str]) -> None:
        self.buffer.set_line(line, value)
        self._changed()

    async def append_lines(self, line: int, values: Sequence[str]) -> None:
        self.buffer.append_lines(line, values)
        self._changed()

    async def capture_input(self, position: Cursor) -> Optional[str]:
        buffer = self.buffer
        marker = buffer.undo_timeline.depth
        buffer.change_word(position)
        self.bus.emit(INSERT_ENTER, buffer.path)
        self.bus.emit(TEXT_CHANGED_INSERT, None)
        if self._scripted_input:
            asyncio.get_running_loop().call_soon(
                self._play_script, self._scripted_input.popleft()
            )
        try:
            await self.bus.wait_for(INSERT_LEAVE)
            return buffer.state.last_inserted
        finally:
            self._rollback(buffer, marker)

    # -- DocumentSource ----------------------------------------------------

    async def working_directory(self) -> str:
        return self.cwd

    async def modified_paths(self) -> Sequence[str]:
        return [key for key, buffer in self._buffers.items() if buffer.modified]

    async def document(self, path: str) -> Optional[OpenDocument]:
        buffer = self._buffers.get(self.resolve(path))
        if buffer is None:
            return None
        return OpenDocument(
            path=self.resolve(path),
            lines=buffer.lines(),
            filetype=buffer.filetype,
            revision=buffer.changed_tick,
        )

    # -- internals ---------------------------------------------------------

    def _changed(self) -> None:
        event = TEXT_CHANGED_INSERT if self.buffer.state.inserting else TEXT_CHANGED
        self.bus.emit(event, None)

    def _play_script(self, text: str) -> None:
        if not self.buffer.state.inserting:
            return
        if text:
            self.type_text(text)
        self.leave_insert()

    def _rollback(self, buffer: Buffer, marker: int) -> None:
        if buffer.state.inserting:
            buffer.end_insert()
        reverted = False
        while buffer.undo_timeline.depth > marker:
            reverted = buffer.undo() or reverted
        if reverted:
            telemetry.record_event(
                "editor.capture_rollback",
                level="debug",
                data={"buffer": buffer.name, "tick": buffer.changed_tick},
                logger_name=LOGGER_NAME,
            )
            self.bus.emit(TEXT_CHANGED, None)


__all__ = ["InMemoryEditor"]
