from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class LoadResult:
    """What a storage adapter found. ``available=False`` means "try the next one"."""

    available: bool
    players: list[dict] = field(default_factory=list)
    matches: list[dict] = field(default_factory=list)
    meta: dict = field(default_factory=dict)

    @classmethod
    def missing(cls) -> "LoadResult":
        return cls(available=False)


class LadderStorage(Protocol):
    name: str

    def load(self) -> LoadResult:
        ...

    def save(self, players: list[dict], matches: list[dict], meta: dict) -> None:
        """Persist the full record set; raises PersistenceError on failure."""
        ...
