"""Boundary types exchanged between buffers, hosts and the backend."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Sequence

from .state import Cursor, Selection


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing what a UI should render."""

    text: str
    cursor: Cursor
    selection: Optional[Selection]
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BufferSnapshot:
    """Payload pushed to the backend on every full or partial sync.

    For a full sync ``buffer`` holds every line of the document; for a partial
    sync it holds only the line under the cursor.
    """

    filetype: str
    file: str
    cwd: str
    revision: int
    line: int
    column: int
    buffer: Sequence[str]

    def as_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["buffer"] = list(self.buffer)
        return payload


class BufferValidationError(RuntimeError):
    """Raised when callers provide out-of-bounds line or cursor info."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor
