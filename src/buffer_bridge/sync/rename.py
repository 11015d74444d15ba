"""Rename as an exclusive, bounded-time transaction."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from buffer_bridge.buffer import BufferValidationError, Cursor
from buffer_bridge.host.protocols import (
    BackendError,
    EditorHost,
    LanguageBackend,
    RenameRequest,
)
from buffer_bridge.runtime import telemetry

from .gate import SyncGateBusyError
from .lsp import document_path
from .patch import DocumentPatch, PatchApplier
from .session import SessionContext

LOGGER_NAME = "buffer_bridge.rename"


class RenameState(str, Enum):
    IDLE = "idle"
    CAPTURING_POSITION = "capturing_position"
    AWAITING_USER_INPUT = "awaiting_user_input"
    REQUESTING_EDIT = "requesting_edit"
    APPLYING_PATCH = "applying_patch"


@dataclass(slots=True)
class RenameTransaction:
    """Record of one rename invocation, returned once it is back to idle."""

    position: Cursor = (0, 0)
    captured_name: Optional[str] = None
    state: RenameState = RenameState.IDLE
    outcome: Optional[str] = None
    applied: int = 0
    dropped: int = 0
    history: List[RenameState] = field(default_factory=list)


class RenameCoordinator:
    """Orchestrates capture, request and patch for a symbol rename.

    The gate is closed only while the user types the new name, so the backend
    never sees the transient edit. Every path, including failures, ends with
    the gate open and the transaction back in ``IDLE``.
    """

    def __init__(
        self,
        session: SessionContext,
        editor: EditorHost,
        backend: LanguageBackend,
        *,
        applier: Optional[PatchApplier] = None,
    ) -> None:
        self.session = session
        self.editor = editor
        self.backend = backend
        self.applier = applier or PatchApplier(editor)
        self.logger = telemetry.get_logger(LOGGER_NAME)
        self._current: Optional[RenameTransaction] = None

    @property
    def state(self) -> RenameState:
        if self._current is None:
            return RenameState.IDLE
        return self._current.state

    async def rename(self) -> RenameTransaction:
        tx = RenameTransaction()
        self._current = tx
        try:
            return await self._run(tx)
        finally:
            if tx.state is not RenameState.IDLE:
                self._advance(tx, RenameState.IDLE)
            self._current = None

    async def _run(self, tx: RenameTransaction) -> RenameTransaction:
        self._advance(tx, RenameState.CAPTURING_POSITION)
        tx.position = await self.editor.cursor()

        gate = self.session.gate
        try:
            await gate.close(owner="rename")
        except SyncGateBusyError as exc:
            self.session.warn("rename already in progress", owner=exc.owner)
            return self._finish(tx, "gate_busy")

        self._advance(tx, RenameState.AWAITING_USER_INPUT)
        try:
            tx.captured_name = await self.editor.capture_input(tx.position)
        finally:
            gate.open()

        if not tx.captured_name:
            return self._finish(tx, "empty_capture")

        self._advance(tx, RenameState.REQUESTING_EDIT)
        state = self.session.state
        request = RenameRequest(
            filetype=state.filetype,
            file=state.file,
            cwd=state.cwd,
            line=tx.position[0],
            column=tx.position[1],
            new_name=tx.captured_name,
        )
        timeout = self.session.config.rename_timeout_s
        try:
            patches = await asyncio.wait_for(
                self.backend.request_rename(request), timeout=timeout
            )
        except asyncio.TimeoutError:
            self.session.warn(
                "rename request timed out", timeout_s=timeout, file=state.file
            )
            return self._finish(tx, "timeout")
        except BackendError as exc:
            self.session.warn("rename request failed", error=str(exc), file=state.file)
            return self._finish(tx, "backend_error")

        self._advance(tx, RenameState.APPLYING_PATCH)
        try:
            await self._apply(tx, patches)
        except (BufferValidationError, ValueError) as exc:
            # the buffer may have changed while the request was in flight
            self.session.warn("rename patch failed", error=str(exc), file=state.file)
            return self._finish(tx, "patch_failed")
        return self._finish(tx, "applied")

    async def _apply(
        self, tx: RenameTransaction, patches: Sequence[DocumentPatch]
    ) -> None:
        for patch in patches:
            if not self._targets_active_buffer(patch):
                # edits for other documents need an editor interface that can
                # patch arbitrary files; until then they are reported, not applied
                tx.dropped += 1
                telemetry.record_event(
                    "rename.patch_dropped",
                    level="debug",
                    data={
                        "document": patch.document_id,
                        "operations": len(patch.operations),
                    },
                    logger_name=LOGGER_NAME,
                )
                continue
            await self.applier.apply(patch.operations)
            tx.applied += 1

    def _targets_active_buffer(self, patch: DocumentPatch) -> bool:
        if not patch.document_id:
            return True
        state = self.session.state
        return document_path(patch.document_id, state.cwd) == document_path(
            state.file, state.cwd
        )

    def _advance(self, tx: RenameTransaction, state: RenameState) -> None:
        tx.state = state
        tx.history.append(state)
        self.logger.debug(f"rename -> {state.value}")

    def _finish(self, tx: RenameTransaction, outcome: str) -> RenameTransaction:
        tx.outcome = outcome
        self._advance(tx, RenameState.IDLE)
        telemetry.record_event(
            "rename.finish",
            data={
                "outcome": outcome,
                "name": tx.captured_name or "",
                "applied": tx.applied,
                "dropped": tx.dropped,
            },
            logger_name=LOGGER_NAME,
        )
        return tx


__all__ = ["RenameCoordinator", "RenameState", "RenameTransaction"]
