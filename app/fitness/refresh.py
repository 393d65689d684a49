"""Background ticker that periodically re-reads storage into memory."""

from __future__ import annotations

import asyncio
import logging

from app.fitness.service import FitnessService

logger = logging.getLogger(__name__)


class RefreshTask:
    def __init__(self, service: FitnessService, interval_seconds: float):
        self.service = service
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.interval_seconds <= 0:
            logger.info("[REFRESH] Disabled")
            return
        if self.running:
            logger.warning("[REFRESH] Already running")
            return
        self._task = asyncio.create_task(self._run(), name="fitness-refresh")
        logger.info("[REFRESH] Started with interval=%ss", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[REFRESH] Stopped")

    async def tick(self) -> None:
        try:
            count = await self.service.reload()
        except Exception as exc:
            logger.error("[REFRESH] Reload failed: %s", exc)
            return
        logger.info("[REFRESH] Reloaded %d records", count)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.tick()
