from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from spelling_session.services.notices import Notifier

logger = logging.getLogger(__name__)

QUALITY_FAILURE = 1
QUALITY_SUCCESS = 5
ALLOWED_QUALITIES = {QUALITY_FAILURE, QUALITY_SUCCESS}


class ProgressSync(Protocol):
    async def update_progress(self, progress_id: int, quality: int) -> None: ...


class ProgressReporter:
    """Fire-and-forget bridge from word outcomes to the progress service.

    ``report`` only schedules the sync call on the running loop. A failed sync
    becomes a transient notice; it never reaches the caller.
    """

    def __init__(self, sync: ProgressSync, notifier: Notifier) -> None:
        self.sync = sync
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    def report(self, progress_id: int, quality: int) -> asyncio.Task:
        if quality not in ALLOWED_QUALITIES:
            raise ValueError(f"unsupported quality score: {quality}")
        task = asyncio.get_running_loop().create_task(self._send(progress_id, quality))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, progress_id: int, quality: int) -> None:
        logger.debug("syncing progress id=%s quality=%s", progress_id, quality)
        try:
            await self.sync.update_progress(progress_id, quality)
        except Exception as exc:
            logger.warning("progress sync failed id=%s quality=%s: %s", progress_id, quality, exc)
            self.notifier.notify(f"Failed to sync progress: {exc}", level="error")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))
