from fastapi import APIRouter, Depends, Response

from poolladder.api.deps import get_repository, get_store, require_admin
from poolladder.schemas.player import PlayerCreateIn, PlayerOut, PlayerSummaryOut, PlayerUpdateIn
from poolladder.services.ladder import LadderStore
from poolladder.services.standings import player_summary
from poolladder.storage.repository import LadderRepository

router = APIRouter()

@router.get("", response_model=list[PlayerOut])
def list_players(store: LadderStore = Depends(get_store)):
    return [PlayerOut.from_player(p) for p in store.players()]

@router.get("/{player_id}", response_model=PlayerSummaryOut)
def get_player(player_id: int, store: LadderStore = Depends(get_store)):
    player = store.get_player(player_id)
    summary = player_summary(store.snapshot(), player)
    return PlayerSummaryOut(
        player=PlayerOut.from_player(summary.player),
        matches_played=summary.matches_played,
        wins=summary.wins,
        losses=summary.losses,
        upcoming=summary.upcoming,
    )

@router.post("", response_model=PlayerOut, status_code=201)
def add_player(
    payload: PlayerCreateIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    player = store.add_player(payload.name)
    repo.save(store)
    return PlayerOut.from_player(player)

@router.patch("/{player_id}", response_model=PlayerOut)
def update_player(
    player_id: int,
    payload: PlayerUpdateIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    player = store.get_player(player_id)
    if payload.name is not None:
        player = store.rename_player(player_id, payload.name)
    if payload.status is not None:
        player = store.set_player_status(player_id, payload.status)
    repo.save(store)
    return PlayerOut.from_player(player)

@router.delete("/{player_id}", status_code=204)
def remove_player(
    player_id: int,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.remove_player(player_id)
    repo.save(store)
    return Response(status_code=204)
