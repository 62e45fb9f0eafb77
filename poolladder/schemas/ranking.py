from pydantic import BaseModel

from poolladder.schemas.player import CamelModel, PlayerOut


class StandingRowOut(PlayerOut):
    win_rate: int
    total_games: int
    tier: str
    trend: str | None


class LadderOut(CamelModel):
    rows: list[StandingRowOut]


class ReorderIn(BaseModel):
    player_ids: list[int]
