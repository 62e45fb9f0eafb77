from __future__ import annotations

import logging
import threading
from typing import Iterable

from poolladder.core.config import Settings
from poolladder.services.ladder import LadderSnapshot, LadderStore
from poolladder.services.records import snapshot_to_records, store_from_records
from poolladder.storage.base import LadderStorage
from poolladder.storage.json_files import JsonFileStorage
from poolladder.storage.memory import MemoryStorage
from poolladder.storage.sql import SqlStorage

logger = logging.getLogger(__name__)


class LadderRepository:
    """
    Ordered list of storages. Loading takes the first one that has data;
    saving writes all of them.
    """

    def __init__(self, storages: Iterable[LadderStorage]):
        self.storages = list(storages)
        self._lock = threading.Lock()

    def load(self, **store_kwargs) -> LadderStore:
        for storage in self.storages:
            result = storage.load()
            if result.available:
                logger.info(
                    "Loaded ladder from %s storage (%s players, %s matches)",
                    storage.name, len(result.players), len(result.matches),
                )
                return store_from_records(result.players, result.matches, result.meta, **store_kwargs)
            logger.info("No ladder data in %s storage", storage.name)
        logger.info("Starting with an empty ladder")
        return LadderStore(**store_kwargs)

    def save(self, store: LadderStore) -> LadderSnapshot:
        # Snapshot inside the lock so the last write always carries the newest state.
        with self._lock:
            snapshot = store.snapshot()
            players, matches, meta = snapshot_to_records(snapshot)
            for storage in self.storages:
                storage.save(players, matches, meta)
            return snapshot


def build_repository(settings: Settings) -> LadderRepository:
    storages: list[LadderStorage] = []
    for backend in (b.strip().lower() for b in settings.STORAGE_BACKENDS.split(",")):
        if not backend:
            continue
        if backend == "sql":
            if not settings.DATABASE_URL:
                logger.warning("STORAGE_BACKENDS lists sql but DATABASE_URL is not set; skipping")
                continue
            storages.append(SqlStorage(settings.DATABASE_URL))
        elif backend == "json":
            storages.append(JsonFileStorage(settings.DATA_DIR))
        elif backend == "memory":
            storages.append(MemoryStorage())
        else:
            raise ValueError(f"Unknown storage backend '{backend}'")
    if not storages:
        storages.append(MemoryStorage())
    return LadderRepository(storages)
