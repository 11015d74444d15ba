"""Minimal Textual adapter that wires key presses into the sync engine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set

from buffer_bridge.buffer import BufferMirror
from buffer_bridge.host import INSERT_ENTER, INSERT_LEAVE, InMemoryEditor
from buffer_bridge.sync import (
    RenameCoordinator,
    RenameState,
    RenameTransaction,
    UpdateDispatcher,
)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


_MOTIONS = {
    "h": (0, -1),
    "j": (1, 0),
    "k": (-1, 0),
    "l": (0, 1),
    "LEFT": (0, -1),
    "DOWN": (1, 0),
    "UP": (-1, 0),
    "RIGHT": (0, 1),
}


class TextualBridgeAdapter:
    """Bridges key presses, the in-memory editor and the sync engine.

    Normal mode understands ``i``, ``a``, ``hjkl``, ``dd`` (as ``D``), ``u``
    and ``r`` (rename the word under the cursor). Insert mode types text until
    ``ESC``.
    """

    def __init__(
        self,
        editor: InMemoryEditor,
        dispatcher: UpdateDispatcher,
        coordinator: RenameCoordinator,
        hooks: TextualUIHooks,
    ) -> None:
        self.editor = editor
        self.dispatcher = dispatcher
        self.coordinator = coordinator
        self.hooks = hooks
        self._tasks: Set[asyncio.Task[RenameTransaction]] = set()
        editor.bus.subscribe(INSERT_ENTER, self._on_insert_enter)
        editor.bus.subscribe(INSERT_LEAVE, self._on_insert_leave)
        self._refresh_buffer()

    def handle_textual_key(self, key: str, *, text: Optional[str] = None) -> str:
        """Apply one key and return a short status label."""

        self._log_state("key ->", key=key, text=text)
        if self.editor.buffer.state.inserting:
            status = self._handle_insert_key(key, text)
        else:
            status = self._handle_normal_key(key)
        self._refresh_buffer()
        self._log_state("result <-", status=status)
        return status

    def _handle_insert_key(self, key: str, text: Optional[str]) -> str:
        if key == "ESC":
            self.editor.leave_insert()
            return "exit_insert"
        if key == "BACKSPACE":
            self.editor.backspace()
            return "backspace"
        if key == "ENTER":
            self.editor.type_text("\n")
            return "newline"
        if text:
            self.editor.type_text(text)
            return "insert"
        return "ignored"

    def _handle_normal_key(self, key: str) -> str:
        if key in _MOTIONS:
            self.editor.move_cursor(*_MOTIONS[key])
            return "move"
        if key == "i":
            self.editor.enter_insert()
            return "enter_insert"
        if key == "a":
            self.editor.enter_insert()
            self.editor.move_cursor(columns=1)
            return "enter_insert"
        if key == "D":
            self.editor.delete_current_line()
            return "delete_line"
        if key == "u":
            return "undo" if self.editor.undo() else "undo_empty"
        if key == "r":
            if self.coordinator.state is not RenameState.IDLE:
                return "rename_busy"
            task = asyncio.get_running_loop().create_task(self.coordinator.rename())
            self._tasks.add(task)
            task.add_done_callback(self._rename_done)
            return "rename"
        return "ignored"

    def _on_insert_enter(self, _payload: object) -> None:
        self.hooks.update_status("-- INSERT --")

    def _on_insert_leave(self, _payload: object) -> None:
        self.hooks.update_status("")

    def _rename_done(self, task: "asyncio.Task[RenameTransaction]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.hooks.update_status(f"rename failed: {exc}")
        else:
            tx = task.result()
            self.hooks.update_status(f"rename:{tx.outcome}")
        self._refresh_buffer()

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.editor.buffer.mirror())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.editor.buffer
        session = self.dispatcher.session
        return {
            "mode": buffer.state.mode,
            "cursor": buffer.state.cursor,
            "buffer": buffer.name,
            "tick": buffer.changed_tick,
            "revision": session.state.revision,
            "gate": "open" if session.gate.is_open() else "closed",
            "rename": self.coordinator.state.value,
        }


__all__ = ["TextualBridgeAdapter", "TextualUIHooks"]
