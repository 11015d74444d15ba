"""Mutual exclusion between background syncs and exclusive transactions."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from buffer_bridge.runtime import telemetry


class SyncGateBusyError(RuntimeError):
    """Raised when a transaction tries to close an already closed gate."""

    def __init__(
        self, message: str = "Sync gate is already closed", *, owner: str | None = None
    ) -> None:
        super().__init__(message)
        self.owner = owner


class SyncGate:
    """Suspends synchronization while one transaction is in flight.

    Syncs read the editor inside ``sync_slot``, serialized on an
    ``asyncio.Lock``, and talk to the backend only after leaving it.
    ``close`` flips the gate immediately, so attempts that have not started
    yet bail out, then waits for any editor read already holding the lock.
    Because the check and the acquisition happen without an intervening
    ``await``, no sync can begin between a transaction's check and its edit.

    The gate is not reentrant: only one transaction may hold it closed, and
    it cannot be reopened while that close is still waiting for the lock.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._closed = False
        self._held = False
        self._owner: str | None = None

    def is_open(self) -> bool:
        return not self._closed

    @property
    def owner(self) -> str | None:
        return self._owner

    async def close(self, *, owner: str = "transaction") -> None:
        if self._closed:
            raise SyncGateBusyError(owner=self._owner)
        self._closed = True
        self._owner = owner
        try:
            await self._lock.acquire()
        except BaseException:
            self._closed = False
            self._owner = None
            raise
        self._held = True
        telemetry.record_event(
            "gate.close",
            level="debug",
            data={"owner": owner},
            logger_name="buffer_bridge.sync",
        )

    def open(self) -> None:
        if self._closed and not self._held:
            raise RuntimeError(
                f"Sync gate close by {self._owner!r} is still pending; cannot reopen"
            )
        if self._held:
            self._held = False
            self._lock.release()
        if self._closed:
            telemetry.record_event(
                "gate.open",
                level="debug",
                data={"owner": self._owner},
                logger_name="buffer_bridge.sync",
            )
        self._closed = False
        self._owner = None

    @asynccontextmanager
    async def exclusive(self, *, owner: str = "transaction") -> AsyncIterator[None]:
        await self.close(owner=owner)
        try:
            yield
        finally:
            self.open()

    @asynccontextmanager
    async def sync_slot(self, *, wait_if_closed: bool = False) -> AsyncIterator[bool]:
        """Yield ``True`` while the caller may sync, ``False`` when blocked.

        With ``wait_if_closed`` the caller queues behind the transaction
        instead of giving up.
        """

        if self._closed and not wait_if_closed:
            yield False
            return
        async with self._lock:
            if self._closed and not wait_if_closed:
                yield False
            else:
                yield True


__all__ = ["SyncGate", "SyncGateBusyError"]
