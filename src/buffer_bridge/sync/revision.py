"""High-water-mark revision tracking."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import SyncState

UNKNOWN_REVISION = -1


class RevisionTracker:
    """Decides whether the active buffer changed since the last sync.

    The stored revision is a high-water mark, not a queue: a burst of edits
    collapses to the latest observed counter and skipped intermediate values
    are never sent on their own. Every sync is a snapshot, so nothing is lost.
    """

    def __init__(self, state: "SyncState") -> None:
        self._state = state

    @property
    def revision(self) -> int:
        return self._state.revision

    def should_sync(self, current_revision: int) -> bool:
        changed = current_revision > self._state.revision
        self._state.revision = current_revision
        return changed

    def reset(self) -> None:
        self._state.revision = UNKNOWN_REVISION


__all__ = ["RevisionTracker", "UNKNOWN_REVISION"]
