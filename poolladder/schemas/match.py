import datetime as dt
from typing import Literal

from pydantic import BaseModel

from poolladder.schemas.player import CamelModel
from poolladder.services.ladder import Match

MatchStatus = Literal["scheduled", "completed"]


class MatchPlayerOut(CamelModel):
    id: int
    name: str
    rank: int | None = None


class MatchOut(CamelModel):
    id: int
    status: str
    player1: MatchPlayerOut
    player2: MatchPlayerOut
    date: dt.date | None
    time: dt.time | None
    player1_score: int | None
    player2_score: int | None
    winner_id: int | None
    winner_name: str | None
    loser_id: int | None
    loser_name: str | None
    created_at: dt.datetime | None
    completed_at: dt.datetime | None

    @classmethod
    def from_match(cls, m: Match, ranks: dict[int, int] | None = None) -> "MatchOut":
        ranks = ranks or {}
        return cls(
            id=m.id,
            status=m.status,
            player1=MatchPlayerOut(id=m.player1_id, name=m.player1_name, rank=ranks.get(m.player1_id)),
            player2=MatchPlayerOut(id=m.player2_id, name=m.player2_name, rank=ranks.get(m.player2_id)),
            date=m.date,
            time=m.time,
            player1_score=m.player1_score,
            player2_score=m.player2_score,
            winner_id=m.winner_id,
            winner_name=m.winner_name,
            loser_id=m.loser_id,
            loser_name=m.loser_name,
            created_at=m.created_at,
            completed_at=m.completed_at,
        )


class MatchListOut(CamelModel):
    rows: list[MatchOut]


class MatchCreateIn(BaseModel):
    player1_id: int
    player2_id: int
    date: dt.date
    time: dt.time | None = None


class MatchResultIn(BaseModel):
    player1_score: int
    player2_score: int


class MatchUpdateIn(BaseModel):
    player1_id: int | None = None
    player2_id: int | None = None
    date: dt.date | None = None
    time: dt.time | None = None
    status: MatchStatus | None = None
    player1_score: int | None = None
    player2_score: int | None = None
