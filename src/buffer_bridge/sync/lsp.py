"""Conversions between editor coordinates, LSP types and line patches."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlparse

from lsprotocol.types import Position, TextDocumentEdit, TextEdit, WorkspaceEdit

from buffer_bridge.buffer import Cursor
from buffer_bridge.runtime import telemetry

from .patch import DocumentPatch, EditOperation

LineReader = Callable[[str], Optional[Sequence[str]]]


def to_lsp_position(line: int, column: int) -> Position:
    """Editor ``(line, column)`` (1-based) to an LSP ``Position`` (0-based)."""

    return Position(line=max(line - 1, 0), character=max(column - 1, 0))


def from_lsp_position(position: Position) -> Cursor:
    return (position.line + 1, position.character + 1)


def uri_to_path(uri: str) -> str:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return uri
    return unquote(parsed.path)


def path_to_uri(path: str) -> str:
    return Path(os.path.abspath(path)).as_uri()


def document_path(document_id: str, cwd: str) -> str:
    """Absolute, normalized path for a URI or a (possibly relative) path."""

    return os.path.normpath(os.path.join(cwd, uri_to_path(document_id)))


def text_edits_to_operations(
    lines: Sequence[str], edits: Iterable[TextEdit]
) -> Tuple[EditOperation, ...]:
    """Translate character-range edits into line operations.

    Edits are processed from the bottom of the document upwards so every
    emitted operation references line numbers that earlier operations have not
    shifted. Several edits on one line fold into successive ``replace``
    operations computed against a working copy.
    """

    working: List[str] = list(lines) or [""]
    ordered = sorted(
        enumerate(edits),
        key=lambda pair: (
            pair[1].range.start.line,
            pair[1].range.start.character,
            pair[0],
        ),
        reverse=True,
    )
    operations: List[EditOperation] = []
    for _, edit in ordered:
        start, end = edit.range.start, edit.range.end
        new_text = edit.new_text

        if start.line >= len(working):
            appended = new_text[:-1] if new_text.endswith("\n") else new_text
            operations.append(EditOperation.append(len(working), appended.split("\n")))
            working.extend(appended.split("\n"))
            continue

        first = start.line
        if end.line >= len(working):
            last = len(working) - 1
            end_char = len(working[last])
            if new_text.endswith("\n"):
                new_text = new_text[:-1]
        else:
            last = end.line
            end_char = min(end.character, len(working[last]))

        prefix = working[first][: start.character]
        suffix = working[last][end_char:]
        replacement = (prefix + new_text + suffix).split("\n")

        operations.append(EditOperation.replace(first + 1, replacement[0]))
        for _ in range(last - first):
            operations.append(EditOperation.delete(first + 2))
        if len(replacement) > 1:
            operations.append(EditOperation.append(first + 1, replacement[1:]))
        working[first : last + 1] = replacement

    return tuple(operations)


def workspace_edit_to_patches(
    edit: WorkspaceEdit, read_lines: LineReader
) -> List[DocumentPatch]:
    """Turn a ``WorkspaceEdit`` into one ``DocumentPatch`` per document.

    ``read_lines`` returns the current lines for a URI, or ``None`` when the
    document is unknown; such documents are skipped. Resource operations
    (create, rename, delete file) are not supported and are skipped too.
    """

    grouped: dict[str, List[TextEdit]] = {}
    for uri, text_edits in (edit.changes or {}).items():
        grouped.setdefault(uri, []).extend(text_edits)
    for change in edit.document_changes or ():
        if isinstance(change, TextDocumentEdit):
            grouped.setdefault(change.text_document.uri, []).extend(
                e for e in change.edits if isinstance(e, TextEdit)
            )
        else:
            telemetry.record_event(
                "lsp.resource_operation_skipped",
                level="debug",
                data={"kind": type(change).__name__},
                logger_name="buffer_bridge.sync",
            )

    patches: List[DocumentPatch] = []
    for uri, text_edits in grouped.items():
        lines = read_lines(uri)
        if lines is None:
            telemetry.record_event(
                "lsp.document_unavailable",
                level="debug",
                data={"uri": uri},
                logger_name="buffer_bridge.sync",
            )
            continue
        operations = text_edits_to_operations(lines, text_edits)
        if operations:
            patches.append(DocumentPatch(operations=operations, document_id=uri))
    return patches


__all__ = [
    "document_path",
    "from_lsp_position",
    "path_to_uri",
    "text_edits_to_operations",
    "to_lsp_position",
    "uri_to_path",
    "workspace_edit_to_patches",
]
