from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from poolladder.services.ladder import Player

PlayerStatus = Literal["active", "inactive", "suspended"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerOut(CamelModel):
    id: int
    name: str
    rank: int
    wins: int
    losses: int
    status: str
    created_at: datetime | None
    last_active_at: datetime | None

    @classmethod
    def from_player(cls, p: Player) -> "PlayerOut":
        return cls(
            id=p.id,
            name=p.name,
            rank=p.rank,
            wins=p.wins,
            losses=p.losses,
            status=p.status,
            created_at=p.created_at,
            last_active_at=p.last_active_at,
        )


class PlayerCreateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)


class PlayerUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=80)
    status: PlayerStatus | None = None


class PlayerSummaryOut(CamelModel):
    player: PlayerOut
    matches_played: int
    wins: int
    losses: int
    upcoming: int
