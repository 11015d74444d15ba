"""Collaborator protocols: the editor on one side, the backend on the other."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Tuple

from buffer_bridge.buffer import BufferSnapshot, Cursor

if TYPE_CHECKING:
    from buffer_bridge.sync.patch import DocumentPatch


@dataclass(frozen=True, slots=True)
class RenameRequest:
    """Everything the backend needs to compute a rename."""

    filetype: str
    file: str
    cwd: str
    line: int
    column: int
    new_name: str

    @property
    def position(self) -> Cursor:
        return (self.line, self.column)


@dataclass(frozen=True, slots=True)
class OpenDocument:
    """In-memory content of an open buffer."""

    path: str
    lines: Sequence[str]
    filetype: str
    revision: int


class BackendError(RuntimeError):
    """Raised by backends when a sync or request fails."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message)
        self.method = method


class EditorHost(Protocol):
    """What the sync engine needs from the editor.

    Every query is awaited: hosts talk to a real editor over RPC, so state is
    pulled at the moment a handler runs rather than carried on events.
    """

    async def identity(self) -> Tuple[str, str, str]:
        """Return ``(cwd, file, filetype)`` of the active buffer."""
        ...

    async def cursor(self) -> Cursor:
        ...

    async def set_cursor(self, line: int, column: int) -> None:
        ...

    async def changed_tick(self) -> int:
        """Native change counter of the active buffer."""
        ...

    async def current_line(self) -> str:
        ...

    async def lines(self) -> Sequence[str]:
        ...

    async def delete_line(self, line: int) -> None:
        ...

    async def set_line(self, line: int, value: Sequence[str]) -> None:
        ...

    async def append_lines(self, line: int, values: Sequence[str]) -> None:
        ...

    async def capture_input(self, position: Cursor) -> Optional[str]:
        """Let the user type a replacement for the word at ``position``.

        Returns the typed text once the user leaves edit mode. The buffer must
        be back to its previous content when this returns or raises.
        """
        ...


class DocumentSource(Protocol):
    """Read access to every open buffer, not just the active one."""

    async def working_directory(self) -> str:
        ...

    async def modified_paths(self) -> Sequence[str]:
        """Absolute paths of open buffers with unsaved changes."""
        ...

    async def document(self, path: str) -> Optional[OpenDocument]:
        ...


class LanguageBackend(Protocol):
    async def full_sync(self, snapshot: BufferSnapshot) -> None:
        ...

    async def partial_sync(self, snapshot: BufferSnapshot) -> None:
        ...

    async def request_rename(self, request: RenameRequest) -> Sequence["DocumentPatch"]:
        ...


__all__ = [
    "BackendError",
    "DocumentSource",
    "EditorHost",
    "LanguageBackend",
    "OpenDocument",
    "RenameRequest",
]
