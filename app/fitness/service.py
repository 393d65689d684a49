"""Record service — store + backend.

Reads come from memory and lazily pull from storage while the store is empty.
Writes upsert in memory and persist under one lock, so saves land in order
and each carries the latest snapshot. A failed persist is logged and the
in-memory record stays (last write wins). A failed load leaves memory as is.
"""

from __future__ import annotations

import asyncio
import logging

from app.fitness.errors import StorageError
from app.fitness.models import FitnessData
from app.fitness.persistence import Backend
from app.fitness.store import RecordStore

logger = logging.getLogger(__name__)


class FitnessService:
    def __init__(self, backend: Backend, store: RecordStore | None = None):
        self.backend = backend
        self.store = store or RecordStore()
        self._lock = asyncio.Lock()

    async def reload(self) -> int:
        """Replace the in-memory records with whatever storage holds now.

        Raises StorageError when storage cannot be read; the store is untouched then.
        """
        async with self._lock:
            records = await self.backend.load()
            self.store.replace_all(records)
            return len(self.store)

    async def ensure_loaded(self) -> RecordStore:
        if self.store.is_empty():
            try:
                await self.reload()
            except StorageError as exc:
                logger.error("Loading from %s failed: %s", self.backend.name, exc)
        return self.store

    async def upsert(self, record: FitnessData) -> bool:
        async with self._lock:
            replaced = self.store.upsert(record)
            logger.info("%s record for %s", "Replaced" if replaced else "Added", record.date)
            try:
                await self.backend.save(self.store.all(), changed_date=record.date)
            except StorageError as exc:
                logger.error("Persisting %s via %s failed: %s", record.date, self.backend.name, exc)
        return replaced

    async def aclose(self) -> None:
        await self.backend.aclose()
