from __future__ import annotations

import copy

from poolladder.storage.base import LoadResult


class MemoryStorage:
    """Process-local cache; available once something has been saved to it."""

    name = "memory"

    def __init__(self, players: list[dict] | None = None, matches: list[dict] | None = None, meta: dict | None = None):
        self._data = None
        if players is not None or matches is not None:
            self.save(players or [], matches or [], meta or {})

    def load(self) -> LoadResult:
        if self._data is None:
            return LoadResult.missing()
        players, matches, meta = copy.deepcopy(self._data)
        return LoadResult(available=True, players=players, matches=matches, meta=meta)

    def save(self, players: list[dict], matches: list[dict], meta: dict) -> None:
        self._data = copy.deepcopy((players, matches, meta))
