"""SQL database storage (any SQLAlchemy URL; sqlite works for local use)."""

from __future__ import annotations

import logging

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from poolladder.db.base import Base
from poolladder.db.session import make_engine, make_session_factory
from poolladder.models import LadderMeta, MatchRow, PlayerRow
from poolladder.services.audit import audit_snapshot
from poolladder.services.errors import PersistenceError
from poolladder.services.records import parse_date, parse_time, parse_timestamp
from poolladder.storage.base import LoadResult

logger = logging.getLogger(__name__)


def _player_out(row: PlayerRow) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "rank": row.rank,
        "wins": row.wins,
        "losses": row.losses,
        "status": row.status,
        "created_at": row.created_at,
        "last_active": row.last_active,
    }


def _match_out(row: MatchRow) -> dict:
    return {
        "id": row.id,
        "status": row.status,
        "player1_id": row.player1_id,
        "player1_name": row.player1_name,
        "player2_id": row.player2_id,
        "player2_name": row.player2_name,
        "match_date": row.match_date,
        "match_time": row.match_time,
        "player1_score": row.player1_score,
        "player2_score": row.player2_score,
        "winner_id": row.winner_id,
        "loser_id": row.loser_id,
        "created_at": row.created_at,
        "completed_at": row.completed_at,
    }


def _player_row(rec: dict) -> PlayerRow:
    return PlayerRow(
        id=rec["id"],
        name=rec["name"],
        rank=rec["rank"],
        wins=rec["wins"],
        losses=rec["losses"],
        status=rec["status"],
        created_at=parse_timestamp(rec.get("createdAt")),
        last_active=parse_timestamp(rec.get("lastActiveAt")),
    )


def _match_row(rec: dict) -> MatchRow:
    return MatchRow(
        id=rec["id"],
        status=rec["status"],
        player1_id=rec["player1"]["id"],
        player1_name=rec["player1"]["name"],
        player2_id=rec["player2"]["id"],
        player2_name=rec["player2"]["name"],
        match_date=parse_date(rec.get("date")),
        match_time=parse_time(rec.get("time")),
        player1_score=rec.get("player1Score"),
        player2_score=rec.get("player2Score"),
        winner_id=rec.get("winnerId"),
        loser_id=rec.get("loserId"),
        created_at=parse_timestamp(rec.get("createdAt")),
        completed_at=parse_timestamp(rec.get("completedAt")),
    )


class SqlStorage:
    name = "sql"

    def __init__(self, database_url: str, create_tables: bool = True):
        self.engine = make_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)
        if create_tables:
            Base.metadata.create_all(self.engine)

    def load(self) -> LoadResult:
        try:
            with self.SessionLocal() as db:
                players = db.execute(sa.select(PlayerRow).order_by(PlayerRow.rank)).scalars().all()
                matches = db.execute(sa.select(MatchRow).order_by(MatchRow.id)).scalars().all()
                meta_rows = db.execute(sa.select(LadderMeta)).scalars().all()
                meta = {row.key: row.value.get("value") for row in meta_rows}
                if not players and not matches and not meta:
                    return LoadResult.missing()
                return LoadResult(
                    available=True,
                    players=[_player_out(r) for r in players],
                    matches=[_match_out(r) for r in matches],
                    meta=meta,
                )
        except SQLAlchemyError as exc:
            logger.error("Could not read ladder from database: %s", exc)
            return LoadResult.missing()

    def save(self, players: list[dict], matches: list[dict], meta: dict) -> None:
        try:
            with self.SessionLocal() as db, db.begin():
                db.execute(sa.delete(MatchRow))
                db.execute(sa.delete(PlayerRow))
                db.add_all([_player_row(rec) for rec in players])
                db.add_all([_match_row(rec) for rec in matches])
                for key, value in meta.items():
                    db.merge(LadderMeta(key=key, value={"value": value}))
                audit_snapshot(db, meta)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not write ladder to database: {exc}") from exc
