"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor
from .sync import BufferValidationError


def ensure_line(
    document: BufferDocument, line: int, *, allow_zero: bool = False
) -> int:
    lower = 0 if allow_zero else 1
    if line < lower or line > document.line_count:
        raise BufferValidationError(f"Line {line} out of range", cursor=(line, 1))
    return line


def ensure_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    line, column = cursor
    ensure_line(document, line)
    text = document.get_line(line - 1)
    # insert mode may sit one past the last character
    if column < 1 or column > len(text) + 1:
        raise BufferValidationError("Column out of range", cursor=cursor)
    return cursor


def clamp_cursor(
    document: BufferDocument, cursor: Cursor, *, insert: bool = False
) -> Cursor:
    line, column = cursor
    line = max(1, min(line, document.line_count))
    text = document.get_line(line - 1)
    limit = len(text) + 1 if insert else max(len(text), 1)
    return (line, max(1, min(column, limit)))
