"""Periodic removal of abandoned sessions.

Runs as a background task on the server's event loop, started and stopped
by the app's startup/shutdown hooks.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from authrelay.relay.store import SessionStore

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Calls ``store.sweep_expired()`` every ``interval`` seconds."""

    def __init__(self, store: SessionStore, interval: float):
        self.store = store
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")
        logger.debug("Session sweeper started (every %ss)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("Session sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.store.sweep_expired()
            except Exception:
                logger.warning("Session sweep failed", exc_info=True)
