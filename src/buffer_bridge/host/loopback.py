"""In-process backend that mirrors synced buffers and answers renames.

It stands in for a real language server in the Textual demo: every full
sync replaces the stored document, every partial sync patches one line, and
a rename replaces whole-word occurrences of the symbol under the cursor.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from lsprotocol.types import Position, Range, TextEdit, WorkspaceEdit

from buffer_bridge.buffer import BufferSnapshot
from buffer_bridge.runtime import telemetry
from buffer_bridge.sync.lsp import (
    document_path,
    path_to_uri,
    workspace_edit_to_patches,
)
from buffer_bridge.sync.patch import DocumentPatch

from .protocols import BackendError, RenameRequest

_WORD = re.compile(r"\w+")


@dataclass
class LoopbackBackend:
    latency_s: float = 0.0
    documents: Dict[str, List[str]] = field(default_factory=dict)
    revisions: Dict[str, int] = field(default_factory=dict)
    full_syncs: List[BufferSnapshot] = field(default_factory=list)
    partial_syncs: List[BufferSnapshot] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.logger = telemetry.get_logger("buffer_bridge.loopback")

    async def full_sync(self, snapshot: BufferSnapshot) -> None:
        key = document_path(snapshot.file, snapshot.cwd)
        self.documents[key] = list(snapshot.buffer)
        self.revisions[key] = snapshot.revision
        self.full_syncs.append(snapshot)

    async def partial_sync(self, snapshot: BufferSnapshot) -> None:
        key = document_path(snapshot.file, snapshot.cwd)
        lines = self.documents.get(key)
        if lines is None:
            raise BackendError(
                f"partial sync for unknown document {key}", method="partial_sync"
            )
        index = snapshot.line - 1
        if 0 <= index < len(lines):
            lines[index] = snapshot.buffer[0]
        self.revisions[key] = snapshot.revision
        self.partial_syncs.append(snapshot)

    async def request_rename(self, request: RenameRequest) -> Sequence[DocumentPatch]:
        if self.latency_s:
            await asyncio.sleep(self.latency_s)
        key = document_path(request.file, request.cwd)
        lines = self.documents.get(key)
        if lines is None:
            raise BackendError(f"rename in unknown document {key}", method="rename")

        symbol = _symbol_at(lines, request.line, request.column)
        if symbol is None:
            self.logger.info(f"no symbol at {request.line}:{request.column}")
            return []

        pattern = re.compile(rf"(?<!\w){re.escape(symbol)}(?!\w)")
        edits = [
            TextEdit(
                range=Range(
                    start=Position(line=row, character=match.start()),
                    end=Position(line=row, character=match.end()),
                ),
                new_text=request.new_name,
            )
            for row, text in enumerate(lines)
            for match in pattern.finditer(text)
        ]
        uri = path_to_uri(key)
        self.logger.info(f"rename {symbol} -> {request.new_name}: {len(edits)} edits")
        return workspace_edit_to_patches(
            WorkspaceEdit(changes={uri: edits}),
            lambda target: self.documents.get(document_path(target, request.cwd)),
        )


def _symbol_at(lines: Sequence[str], line: int, column: int) -> Optional[str]:
    if not 1 <= line <= len(lines):
        return None
    index = column - 1
    for match in _WORD.finditer(lines[line - 1]):
        if match.start() <= index < match.end():
            return match.group(0)
    return None


__all__ = ["LoopbackBackend"]
