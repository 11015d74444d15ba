"""High-level buffer façade combining document, cursor state and undo."""

from __future__ import annotations

import re
from contextlib import AbstractContextManager
from typing import ContextManager, List, Optional, Sequence, Tuple, Union

from buffer_bridge.runtime import telemetry

from .document import BufferDocument
from .state import BufferState, Cursor, InsertSession
from .sync import BufferMirror
from .undo import UndoEntry, UndoTimeline
from .validation import clamp_cursor, ensure_line

_WORD = re.compile(r"\w")

LineValue = Union[str, Sequence[str]]


class Buffer:
    """One open document: lines, cursor, mode and undo history.

    Line numbers are 1-based throughout, matching what an editor reports.
    Every mutation produces a new ``BufferDocument`` so ``changed_tick``
    increases by exactly one per edit.
    """

    def __init__(
        self,
        *,
        path: str = "",
        filetype: str = "",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self.path = path
        self.filetype = filetype
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.undo_timeline = undo or UndoTimeline()
        self._typed: List[str] = []

    @classmethod
    def from_text(cls, text: str, *, path: str = "", filetype: str = "") -> "Buffer":
        return cls(
            path=path, filetype=filetype, document=BufferDocument.from_text(text)
        )

    @property
    def name(self) -> str:
        return self.path or "[No Name]"

    @property
    def changed_tick(self) -> int:
        return self.document.version

    @property
    def modified(self) -> bool:
        return self.document.dirty

    @property
    def line_count(self) -> int:
        return self.document.line_count

    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    def get_line(self, line: int) -> str:
        ensure_line(self.document, line)
        return self.document.get_line(line - 1)

    def current_line(self) -> str:
        return self.document.get_line(self.state.cursor[0] - 1)

    def set_cursor(self, line: int, column: int) -> Cursor:
        cursor = clamp_cursor(
            self.document, (line, column), insert=self.state.inserting
        )
        self.state.set_cursor(*cursor)
        return cursor

    # -- line primitives -------------------------------------------------

    def set_line(self, line: int, value: LineValue) -> None:
        """Overwrite ``line`` (and following lines for a list value)."""

        ensure_line(self.document, line)
        values = [value] if isinstance(value, str) else list(value)
        lines = list(self.document.snapshot())
        lines[line - 1 : line - 1 + len(values)] = values
        self._apply("set_line", lines, self.state.cursor)

    def delete_line(self, line: int) -> None:
        ensure_line(self.document, line)
        lines = list(self.document.snapshot())
        del lines[line - 1]
        self._apply("delete_line", lines, self.state.cursor)

    def append_lines(self, line: int, values: LineValue) -> None:
        """Insert ``values`` after ``line``; ``0`` inserts above the first line."""

        ensure_line(self.document, line, allow_zero=True)
        new_lines = [values] if isinstance(values, str) else list(values)
        lines = list(self.document.snapshot())
        lines[line:line] = new_lines
        self._apply("append_lines", lines, self.state.cursor)

    # -- insert mode ---------------------------------------------------------

    def begin_insert(self, *, label: str = "insert") -> None:
        if self.state.inserting:
            return
        self.state.insert_session = InsertSession(
            lines=self.document.snapshot(), cursor=self.state.cursor, label=label
        )
        self.state.mode = "insert"
        self._typed = []

    def insert_text(self, text: str) -> None:
        if not self.state.inserting:
            raise RuntimeError("insert_text requires insert mode")
        line, column = self.state.cursor
        current = self.document.get_line(line - 1)
        head, tail = current[: column - 1], current[column - 1 :]
        pieces = (head + text + tail).split("\n")
        lines = list(self.document.snapshot())
        lines[line - 1 : line] = pieces
        last = pieces[-1]
        cursor = (line + len(pieces) - 1, len(last) - len(tail) + 1)
        self._typed.append(text)
        self._apply("insert_text", lines, cursor)

    def backspace(self) -> None:
        if not self.state.inserting:
            raise RuntimeError("backspace requires insert mode")
        line, column = self.state.cursor
        if column <= 1:
            return
        current = self.document.get_line(line - 1)
        lines = list(self.document.snapshot())
        lines[line - 1] = current[: column - 2] + current[column - 1 :]
        typed = "".join(self._typed)
        self._typed = [typed[:-1]]
        self._apply("backspace", lines, (line, column - 1))

    def end_insert(self) -> str:
        """Leave insert mode, recording the whole session as one undo step."""

        session = self.state.insert_session
        if session is None:
            return ""
        typed = "".join(self._typed)
        after = self.document.snapshot()
        if tuple(session.lines) != tuple(after):
            self.undo_timeline.push(
                UndoEntry(
                    label=session.label,
                    before_lines=session.lines,
                    after_lines=after,
                    cursor_before=session.cursor,
                    cursor_after=self.state.cursor,
                )
            )
        self.state.insert_session = None
        self.state.mode = "normal"
        self.state.last_inserted = typed
        self._typed = []
        line, column = self.state.cursor
        self.set_cursor(line, column - 1)
        return typed

    def word_bounds(self, cursor: Optional[Cursor] = None) -> Tuple[int, int]:
        """Return 0-based ``[start, end)`` of the word under ``cursor``."""

        line, column = cursor or self.state.cursor
        text = self.get_line(line)
        index = column - 1
        if index >= len(text) or not _WORD.match(text[index]):
            return (index, index)
        start = index
        while start > 0 and _WORD.match(text[start - 1]):
            start -= 1
        end = index
        while end < len(text) and _WORD.match(text[end]):
            end += 1
        return (start, end)

    def change_word(self, cursor: Optional[Cursor] = None) -> str:
        """Delete the word under the cursor and enter insert mode (``ciw``)."""

        target = cursor or self.state.cursor
        self.state.set_cursor(*clamp_cursor(self.document, target))
        line = self.state.cursor[0]
        start, end = self.word_bounds()
        text = self.get_line(line)
        self.state.set_selection((line, start + 1), (line, end))
        self.begin_insert(label="change_word")
        lines = list(self.document.snapshot())
        lines[line - 1] = text[:start] + text[end:]
        self._apply("change_word", lines, (line, start + 1))
        self.state.clear_selection()
        return text[start:end]

    # -- history ---------------------------------------------------------

    def undo(self) -> bool:
        if self.state.inserting:
            self.end_insert()
        entry = self.undo_timeline.undo()
        if entry is None:
            return False
        self._restore(f"undo::{entry.label}", entry.before_lines, entry.cursor_before)
        return True

    def redo(self) -> bool:
        entry = self.undo_timeline.redo()
        if entry is None:
            return False
        self._restore(f"redo::{entry.label}", entry.after_lines, entry.cursor_after)
        return True

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.text(),
            cursor=self.state.cursor,
            selection=self.state.selection,
            attributes={"mode": self.state.mode, **(attributes or {})},
        )

    def _restore(self, label: str, lines: Sequence[str], cursor: Cursor) -> None:
        with Transaction(self, label):
            self.document = self.document.replace(lines=lines)
            self.state.set_cursor(*clamp_cursor(self.document, cursor))

    def _apply(self, label: str, lines: Sequence[str], cursor_after: Cursor) -> None:
        with Transaction(self, label) as tx:
            before = self.document.snapshot()
            cursor_before = self.state.cursor
            self.document = self.document.replace(lines=lines)
            self.state.set_cursor(
                *clamp_cursor(self.document, cursor_after, insert=self.state.inserting)
            )
            # insert sessions are committed as a single entry by end_insert
            if not self.state.inserting:
                tx.commit(
                    before, self.document.snapshot(), cursor_before, self.state.cursor
                )


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def commit(
        self,
        before_lines: Sequence[str],
        after_lines: Sequence[str],
        cursor_before: Cursor,
        cursor_after: Cursor,
    ) -> None:
        self.buffer.undo_timeline.push(
            UndoEntry(
                label=self.label,
                before_lines=before_lines,
                after_lines=after_lines,
                cursor_before=cursor_before,
                cursor_after=cursor_after,
            )
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
