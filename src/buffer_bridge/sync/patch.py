"""Line-level patches and their application to the active buffer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from buffer_bridge.buffer import BufferValidationError
from buffer_bridge.host.protocols import EditorHost
from buffer_bridge.runtime import telemetry

LOGGER_NAME = "buffer_bridge.patch"


class EditKind(str, Enum):
    DELETE = "delete"
    REPLACE = "replace"
    APPEND = "append"


@dataclass(frozen=True, slots=True)
class EditOperation:
    """One line-level edit; ``line`` is 1-based.

    ``append`` inserts after ``line`` (``0`` means above the first line).
    """

    kind: EditKind
    line: int
    value: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EditKind(self.kind))
        if self.value is not None:
            value = (self.value,) if isinstance(self.value, str) else tuple(self.value)
            object.__setattr__(self, "value", value)
        lower = 0 if self.kind is EditKind.APPEND else 1
        if self.line < lower:
            raise ValueError(
                f"{self.kind.value} line must be >= {lower}, got {self.line}"
            )
        if self.kind is EditKind.DELETE and self.value is not None:
            raise ValueError("delete operations carry no value")
        if self.kind is not EditKind.DELETE and self.value is None:
            raise ValueError(f"{self.kind.value} operations require a value")

    @classmethod
    def delete(cls, line: int) -> "EditOperation":
        return cls(EditKind.DELETE, line)

    @classmethod
    def replace(cls, line: int, value: str | Sequence[str]) -> "EditOperation":
        return cls(EditKind.REPLACE, line, value)  # type: ignore[arg-type]

    @classmethod
    def append(cls, line: int, value: str | Sequence[str]) -> "EditOperation":
        return cls(EditKind.APPEND, line, value)  # type: ignore[arg-type]

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "EditOperation":
        """Parse ``{"op": "replace", "line": 3, "val": ["text"]}``."""

        try:
            kind = data["op"]
            line = int(data["line"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed edit operation: {dict(data)!r}") from exc
        value = data.get("val")
        if value is not None and not isinstance(value, str):
            value = tuple(str(item) for item in value)
        return cls(EditKind(kind), line, value)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"op": self.kind.value, "line": self.line}
        if self.value is not None:
            payload["val"] = list(self.value)
        return payload


@dataclass(frozen=True, slots=True)
class DocumentPatch:
    """Operations for one document; ``document_id=None`` targets the active buffer."""

    operations: Tuple[EditOperation, ...]
    document_id: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "DocumentPatch":
        document_id = data.get("documentId") or data.get("uri") or data.get("file")
        operations = tuple(
            op if isinstance(op, EditOperation) else EditOperation.from_wire(op)
            for op in data.get("operations", ())
        )
        return cls(operations=operations, document_id=document_id)


class PatchApplier:
    """Apply ordered line operations to the active buffer.

    Operations run exactly in the given order and line numbers are NOT
    adjusted for earlier deletes or appends in the same patch. Producers must
    emit stable line numbers, usually by ordering multi-line edits bottom to
    top. A patch that would address a line outside the buffer is rejected
    with ``BufferValidationError`` before any operation runs. The cursor is
    restored afterwards, clamped if the buffer shrank.
    """

    def __init__(self, editor: EditorHost) -> None:
        self._editor = editor

    async def apply(self, operations: Iterable[EditOperation]) -> int:
        ops = list(operations)
        if not ops:
            return 0
        _check_bounds(len(await self._editor.lines()), ops)
        line, column = await self._editor.cursor()
        try:
            for op in ops:
                if op.kind is EditKind.DELETE:
                    await self._editor.delete_line(op.line)
                elif op.kind is EditKind.REPLACE:
                    await self._editor.set_line(op.line, op.value or ())
                else:
                    await self._editor.append_lines(op.line, op.value or ())
        finally:
            lines = await self._editor.lines()
            restored = _clamp(lines, line, column)
            await self._editor.set_cursor(*restored)
        telemetry.record_event(
            "patch.applied",
            data={"operations": len(ops), "cursor": restored},
            logger_name=LOGGER_NAME,
        )
        return len(ops)


def _check_bounds(line_count: int, ops: Sequence[EditOperation]) -> None:
    """Raise before touching the buffer if any operation would be out of range."""

    for op in ops:
        lower = 0 if op.kind is EditKind.APPEND else 1
        if not lower <= op.line <= line_count:
            raise BufferValidationError(
                f"{op.kind.value} at line {op.line} out of range (1..{line_count})",
                cursor=(op.line, 1),
            )
        if op.kind is EditKind.DELETE:
            line_count = max(line_count - 1, 1)
        elif op.kind is EditKind.REPLACE:
            line_count = max(line_count, op.line - 1 + len(op.value or ()))
        else:
            line_count += len(op.value or ())


def _clamp(lines: Sequence[str], line: int, column: int) -> Tuple[int, int]:
    line = max(1, min(line, len(lines) or 1))
    text = lines[line - 1] if lines else ""
    return (line, max(1, min(column, len(text) or 1)))


__all__ = ["DocumentPatch", "EditKind", "EditOperation", "PatchApplier"]
