"""Flat JSON files: ``players.json``, ``matches.json`` and ``meta.json``."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from poolladder.services.errors import PersistenceError
from poolladder.storage.base import LoadResult

logger = logging.getLogger(__name__)

PLAYERS_FILE = "players.json"
MATCHES_FILE = "matches.json"
META_FILE = "meta.json"


class JsonFileStorage:
    name = "json"

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def _read(self, filename: str, default):
        path = self.data_dir / filename
        if not path.exists():
            return default
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def load(self) -> LoadResult:
        if not (self.data_dir / PLAYERS_FILE).exists() and not (self.data_dir / MATCHES_FILE).exists():
            return LoadResult.missing()
        try:
            players = self._read(PLAYERS_FILE, [])
            matches = self._read(MATCHES_FILE, [])
            meta = self._read(META_FILE, {})
        except (OSError, ValueError) as exc:  # JSONDecodeError, UnicodeDecodeError
            logger.error("Could not read ladder files from %s: %s", self.data_dir, exc)
            return LoadResult.missing()
        return LoadResult(
            available=True,
            players=players if isinstance(players, list) else [],
            matches=matches if isinstance(matches, list) else [],
            meta=meta if isinstance(meta, dict) else {},
        )

    def _write(self, filename: str, payload) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}.", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self.data_dir / filename)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def save(self, players: list[dict], matches: list[dict], meta: dict) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._write(PLAYERS_FILE, players)
            self._write(MATCHES_FILE, matches)
            self._write(META_FILE, meta)
        except OSError as exc:
            raise PersistenceError(f"Could not write ladder files to {self.data_dir}: {exc}") from exc
        logger.info("Saved %s players and %s matches to %s", len(players), len(matches), self.data_dir)
