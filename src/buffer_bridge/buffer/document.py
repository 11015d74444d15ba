"""Core document data structures for editor buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish list-of-lines text storage.

    ``version`` plays the role of the editor's native change counter: every
    derived document carries ``version + 1``, so the counter only ever grows
    for the lifetime of the buffer, undo included.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0
    dirty: bool = False

    @classmethod
    def from_text(cls, text: str, *, version: int = 0) -> "BufferDocument":
        lines = text.split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        return cls(_lines=lines, version=version, dirty=False)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines)

    def replace(self, *, lines: Iterable[str]) -> "BufferDocument":
        """Return a new document with the provided lines and bumped version."""

        updated = list(lines) or [""]
        return BufferDocument(_lines=updated, version=self.version + 1, dirty=True)

    def mark_saved(self) -> None:
        self.dirty = False

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]
