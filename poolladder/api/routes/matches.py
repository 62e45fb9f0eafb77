from typing import Literal

from fastapi import APIRouter, Depends, Query, Response

from poolladder.api.deps import get_repository, get_store, require_admin
from poolladder.schemas.match import MatchCreateIn, MatchListOut, MatchOut, MatchResultIn, MatchUpdateIn
from poolladder.services.ladder import LadderStore
from poolladder.services.standings import results, schedule
from poolladder.storage.repository import LadderRepository

router = APIRouter()

def _ranks(store: LadderStore) -> dict[int, int]:
    return {p.id: p.rank for p in store.players()}

@router.get("", response_model=MatchListOut)
def list_matches(
    status: Literal["scheduled", "completed"] | None = Query(default=None),
    store: LadderStore = Depends(get_store),
):
    ranks = _ranks(store)
    rows = [m for m in store.matches() if status is None or m.status == status]
    return MatchListOut(rows=[MatchOut.from_match(m, ranks) for m in rows])

@router.get("/schedule", response_model=MatchListOut)
def upcoming(store: LadderStore = Depends(get_store)):
    snapshot = store.snapshot()
    ranks = {p.id: p.rank for p in snapshot.players}
    return MatchListOut(rows=[MatchOut.from_match(m, ranks) for m in schedule(snapshot)])

@router.get("/results", response_model=MatchListOut)
def recent_results(
    player_id: int | None = Query(default=None),
    search: str | None = Query(default=None, max_length=80),
    since_days: int | None = Query(default=None, ge=1, description="7 for last week, 30 for last month"),
    limit: int = Query(default=50, ge=1, le=500),
    store: LadderStore = Depends(get_store),
):
    rows = results(store.snapshot(), player_id=player_id, search=search, since_days=since_days)[:limit]
    return MatchListOut(rows=[
        MatchOut.from_match(r.match, {r.match.player1_id: r.player1_rank, r.match.player2_id: r.player2_rank})
        for r in rows
    ])

@router.get("/{match_id}", response_model=MatchOut)
def get_match(match_id: int, store: LadderStore = Depends(get_store)):
    return MatchOut.from_match(store.get_match(match_id), _ranks(store))

@router.post("", response_model=MatchOut, status_code=201)
def schedule_match(
    payload: MatchCreateIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    match = store.schedule_match(payload.player1_id, payload.player2_id, payload.date, payload.time)
    repo.save(store)
    return MatchOut.from_match(match, _ranks(store))

@router.delete("/{match_id}", status_code=204)
def cancel_match(
    match_id: int,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    store.cancel_match(match_id)
    repo.save(store)
    return Response(status_code=204)

@router.post("/{match_id}/result", response_model=MatchOut)
def record_result(
    match_id: int,
    payload: MatchResultIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    match = store.record_result(match_id, payload.player1_score, payload.player2_score)
    repo.save(store)
    return MatchOut.from_match(match, _ranks(store))

@router.patch("/{match_id}", response_model=MatchOut)
def edit_match(
    match_id: int,
    payload: MatchUpdateIn,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
    repo: LadderRepository = Depends(get_repository),
):
    match = store.edit_match(
        match_id,
        player1_id=payload.player1_id,
        player2_id=payload.player2_id,
        date=payload.date,
        time=payload.time,
        status=payload.status,
        score1=payload.player1_score,
        score2=payload.player2_score,
    )
    repo.save(store)
    return MatchOut.from_match(match, _ranks(store))
