"""Explicitly owned session context shared by the sync components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from buffer_bridge.runtime import BridgeConfig, telemetry

from .gate import SyncGate
from .revision import UNKNOWN_REVISION, RevisionTracker

WarningChannel = Callable[..., None]


@dataclass(slots=True)
class SyncState:
    """Identity of the active buffer plus the last revision pushed."""

    filetype: str = ""
    file: str = ""
    cwd: str = ""
    revision: int = UNKNOWN_REVISION

    def reset(self, *, cwd: str, file: str, filetype: str) -> None:
        self.cwd = cwd
        self.file = file
        self.filetype = filetype
        self.revision = UNKNOWN_REVISION


class SessionContext:
    """One editor session: config, sync state, gate and warning channel.

    Components receive the context in their constructor instead of reaching
    for module globals, so several sessions can coexist in tests.
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        *,
        warn: Optional[WarningChannel] = None,
    ) -> None:
        self.config = config or BridgeConfig()
        self.state = SyncState()
        self.gate = SyncGate()
        self.tracker = RevisionTracker(self.state)
        self._warn = warn

    def warn(self, message: str, **data: Any) -> None:
        """Surface a user-visible warning."""

        if self._warn is not None:
            self._warn(message, **data)
            return
        telemetry.record_event(
            "warning",
            level="warning",
            data={"message": message, **data},
            logger_name="buffer_bridge.session",
        )


__all__ = ["SessionContext", "SyncState", "WarningChannel"]
