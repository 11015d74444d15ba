"""In-memory buffer model: documents, cursor state and undo history."""

from .buffer import Buffer, Transaction
from .document import BufferDocument
from .state import BufferState, Cursor, InsertSession, Selection
from .sync import BufferMirror, BufferSnapshot, BufferValidationError
from .undo import UndoEntry, UndoTimeline
from .validation import clamp_cursor, ensure_cursor, ensure_line

__all__ = [
    "Buffer",
    "BufferDocument",
    "BufferMirror",
    "BufferSnapshot",
    "BufferState",
    "BufferValidationError",
    "Cursor",
    "InsertSession",
    "Selection",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "clamp_cursor",
    "ensure_cursor",
    "ensure_line",
]
