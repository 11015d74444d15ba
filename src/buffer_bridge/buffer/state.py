"""Cursor, mode and insert-session state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

Cursor = Tuple[int, int]  # (line, column), both 1-based like the editor reports
Selection = Tuple[Cursor, Cursor]


@dataclass(slots=True)
class InsertSession:
    """Buffer contents captured when insert mode started."""

    lines: Sequence[str]
    cursor: Cursor
    label: str


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + selection info tied to a BufferDocument version."""

    cursor: Cursor = (1, 1)
    selection: Optional[Selection] = None
    mode: str = "normal"
    last_inserted: str = ""
    insert_session: Optional[InsertSession] = None

    def set_cursor(self, line: int, column: int) -> None:
        self.cursor = (line, column)

    def clear_selection(self) -> None:
        self.selection = None

    def set_selection(self, start: Cursor, end: Cursor) -> None:
        self.selection = (start, end)

    @property
    def inserting(self) -> bool:
        return self.mode == "insert"
