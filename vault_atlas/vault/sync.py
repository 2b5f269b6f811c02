"""
Background rescanning.

The scan runs in a worker thread; the result is applied to the session on
the event loop in one step. A failed scan leaves the last good snapshot in
place and only sets the session's error message.
"""

import asyncio
from typing import Callable, Optional

import structlog

from ..config import settings
from ..core.hierarchy import TreeSnapshot
from ..core.session import MapSession
from .scanner import scan_vault_if_exists

logger = structlog.get_logger()

SCAN_FAILED_MESSAGE = "Vault scan failed."

Scanner = Callable[[str], Optional[TreeSnapshot]]


class VaultSync:
    """Periodic rescan of the session's vault."""

    def __init__(self, session: MapSession, scanner: Scanner = scan_vault_if_exists,
                 interval_seconds: Optional[float] = None):
        self.session = session
        self.scanner = scanner
        self.interval_seconds = (settings.rescan_interval_seconds
                                 if interval_seconds is None else interval_seconds)
        self._started = 0
        self._applied = 0
        self._task: Optional[asyncio.Task] = None

    async def rescan(self, vault_path: Optional[str] = None) -> bool:
        """
        Scan once and apply the result.

        A result is discarded if a scan started later has already been
        applied.

        Returns:
            True when a new snapshot was applied
        """
        path = vault_path or self.session.vault_path
        if not path:
            return False

        self._started += 1
        generation = self._started
        try:
            snapshot = await asyncio.to_thread(self.scanner, path)
        except OSError as e:
            logger.error("Vault scan failed", path=path, error=str(e))
            self.session.error = SCAN_FAILED_MESSAGE
            return False

        if snapshot is None:
            self.session.error = SCAN_FAILED_MESSAGE
            return False
        if generation < self._applied:
            logger.debug("Stale scan result discarded", generation=generation)
            return False

        self._applied = generation
        self.session.set_snapshot(snapshot)
        return True

    async def run(self) -> None:
        """Scan now, then every ``interval_seconds`` until cancelled."""
        while True:
            await self.rescan()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
