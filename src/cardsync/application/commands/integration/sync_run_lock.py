"""Process-wide guard allowing a single sync run at a time."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from cardsync.domain.shared.exceptions import SyncAlreadyRunningError

logger = logging.getLogger(__name__)


class SyncRunLock:
    """
    Single-slot lock owned by whoever triggers sync runs.

    The portal's second factor is bound to one browser session, so a second
    concurrent run is rejected instead of queued.
    """

    def __init__(self) -> None:
        self._held = False

    @property
    def is_held(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        if self._held:
            return False
        self._held = True
        return True

    def acquire(self) -> None:
        """Take the slot or raise SyncAlreadyRunningError."""
        if not self.try_acquire():
            logger.info("Sync requested while another run is in progress")
            raise SyncAlreadyRunningError

    def release(self) -> None:
        self._held = False

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[SyncRunLock]:
        self.acquire()
        try:
            yield self
        finally:
            self.release()
