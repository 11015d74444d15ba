from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Sequence, Tuple

from buffer_bridge.buffer import BufferSnapshot
from buffer_bridge.host import InMemoryEditor, RenameRequest
from buffer_bridge.runtime import BridgeConfig
from buffer_bridge.sync import DocumentPatch, SessionContext

FAST = BridgeConfig(
    buffer_enter_debounce_ms=0,
    text_changed_debounce_ms=0,
    insert_debounce_ms=0,
    rename_timeout_s=1.0,
)


class RecordingBackend:
    """Backend double that records syncs and returns canned rename patches."""

    def __init__(
        self,
        patches: Sequence[DocumentPatch] = (),
        *,
        hang: bool = False,
        error: Optional[Exception] = None,
        delay_s: float = 0.0,
    ) -> None:
        self.patches = list(patches)
        self.hang = hang
        self.delay_s = delay_s
        self.error = error
        self.full: List[BufferSnapshot] = []
        self.partial: List[BufferSnapshot] = []
        self.requests: List[RenameRequest] = []

    async def full_sync(self, snapshot: BufferSnapshot) -> None:
        if self.error is not None:
            raise self.error
        self.full.append(snapshot)

    async def partial_sync(self, snapshot: BufferSnapshot) -> None:
        if self.error is not None:
            raise self.error
        self.partial.append(snapshot)

    async def request_rename(self, request: RenameRequest) -> Sequence[DocumentPatch]:
        self.requests.append(request)
        if self.hang:
            await asyncio.Event().wait()
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.patches


class WarningLog:
    def __init__(self) -> None:
        self.messages: List[Tuple[str, dict[str, Any]]] = []

    def __call__(self, message: str, **data: Any) -> None:
        self.messages.append((message, data))

    def __contains__(self, message: object) -> bool:
        return any(text == message for text, _ in self.messages)


def make_session(
    config: Optional[BridgeConfig] = None,
) -> Tuple[SessionContext, WarningLog]:
    warnings = WarningLog()
    return SessionContext(config or FAST, warn=warnings), warnings


def make_editor(
    text: str = "let x = 1", *, path: str = "main.js", cwd: str = "."
) -> InMemoryEditor:
    editor = InMemoryEditor(cwd=cwd)
    editor.open(path, text, filetype="javascript")
    return editor
