from typing import Literal

from fastapi import APIRouter, Depends, Query

from poolladder.api.deps import get_repository, get_store, require_admin
from poolladder.schemas.player import PlayerOut
from poolladder.schemas.ranking import LadderOut, ReorderIn, StandingRowOut
from poolladder.services.ladder import LadderStore
from poolladder.services.standings import standings
from poolladder.storage.repository import LadderRepository

router = APIRouter()

def _ladder_out(store: LadderStore, status: str | None = None, search: str | None = None, sort: str = "rank") -> LadderOut:
    rows = []
    for row in standings(store.snapshot(), status=status, search=search, sort=sort):
        rows.append(StandingRowOut(
            **PlayerOut.from_player(row.player).model_dump(),
            win_rate=row.win_rate,
            total_games=row.total_games,
            tier=row.tier,
            trend=row.trend,
        ))
    return LadderOut(rows=rows)

@router.get("", response_model=LadderOut)
def ladder(
    status: Literal["active", "inactive", "suspended"] | None = Query(default=None),
    search: str | None = Query(default=None, max_length=80),
    sort: Literal["rank", "wins", "win_rate"] = Query(default="rank"),
    store: LadderStore = Depends(get_store),
):
    return _ladder_out(store, status, search, sort)

@router.post("/{player_id}/move-up", response_model=LadderOut)
def move_up(
    player_id: int,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.move_up(player_id)
    repo.save(store)
    return _ladder_out(store)

@router.post("/{player_id}/move-down", response_model=LadderOut)
def move_down(
    player_id: int,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.move_down(player_id)
    repo.save(store)
    return _ladder_out(store)

@router.put("/order", response_model=LadderOut)
def reorder(
    payload: ReorderIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.reorder(payload.player_ids)
    repo.save(store)
    return _ladder_out(store)

@router.post("/recalculate", response_model=LadderOut)
def recalculate(
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.recalculate_by_record()
    repo.save(store)
    return _ladder_out(store)

@router.post("/reset", response_model=LadderOut)
def reset(
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.reset_all()
    repo.save(store)
    return _ladder_out(store)
