from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from poolladder.core.security import now_utc
from poolladder.services.ladder import LadderSnapshot, Match, Player

STANDINGS_SORTS = ("rank", "wins", "win_rate")

def win_rate(wins: int, losses: int) -> int:
    total = wins + losses
    if total == 0:
        return 0
    # round half up, like the public site always did
    return int(wins * 100 / total + 0.5)

def tier_for_rank(rank: int) -> str:
    if rank <= 3:
        return "champion"
    if rank <= 6:
        return "contender"
    if rank <= 10:
        return "challenger"
    return "regular"

def trend_for(player: Player) -> str | None:
    if player.total_games < 3:
        return None
    rate = win_rate(player.wins, player.losses)
    if rate >= 70:
        return "hot"
    if rate <= 30:
        return "cold"
    if player.rank <= 5:
        return "rising"
    return None

@dataclass
class StandingRow:
    player: Player
    win_rate: int
    total_games: int
    tier: str
    trend: str | None

@dataclass
class ResultRow:
    match: Match
    player1_rank: int | None
    player2_rank: int | None

@dataclass
class PlayerSummary:
    player: Player
    matches_played: int
    wins: int
    losses: int
    upcoming: int

def _name_matches(name: str, search: str | None) -> bool:
    return not search or search.strip().casefold() in name.casefold()

def standings(
    snapshot: LadderSnapshot,
    status: str | None = None,
    search: str | None = None,
    sort: str = "rank",
) -> list[StandingRow]:
    if sort not in STANDINGS_SORTS:
        raise ValueError(f"Unknown standings sort '{sort}'")
    rows = []
    for p in snapshot.players:
        if status is not None and p.status != status:
            continue
        if not _name_matches(p.name, search):
            continue
        rows.append(StandingRow(
            player=p,
            win_rate=win_rate(p.wins, p.losses),
            total_games=p.total_games,
            tier=tier_for_rank(p.rank),
            trend=trend_for(p),
        ))
    # rows arrive in rank order; the sorts below are stable, so rank breaks ties
    if sort == "wins":
        rows.sort(key=lambda r: -r.player.wins)
    elif sort == "win_rate":
        rows.sort(key=lambda r: -r.win_rate)
    return rows

def _kickoff(match: Match) -> datetime:
    day = match.date or date.min
    return datetime.combine(day, match.time or time(0, 0), tzinfo=timezone.utc)

def schedule(snapshot: LadderSnapshot) -> list[Match]:
    upcoming = [m for m in snapshot.matches if m.status == "scheduled"]
    return sorted(upcoming, key=lambda m: (_kickoff(m), m.id))

def results(
    snapshot: LadderSnapshot,
    player_id: int | None = None,
    search: str | None = None,
    since_days: int | None = None,
    now: datetime | None = None,
) -> list[ResultRow]:
    """
    Completed matches, newest first. `search` matches either player name;
    `since_days` keeps matches completed within that many days of `now`.
    """
    ranks = {p.id: p.rank for p in snapshot.players}
    cutoff = None
    if since_days is not None:
        cutoff = (now or now_utc()) - timedelta(days=since_days)
    completed = [
        m for m in snapshot.matches
        if m.status == "completed"
        and (player_id is None or m.involves(player_id))
        and (_name_matches(m.player1_name, search) or _name_matches(m.player2_name, search))
        and (cutoff is None or (m.completed_at or _kickoff(m)) >= cutoff)
    ]
    completed.sort(key=lambda m: (_kickoff(m), m.id), reverse=True)
    return [
        ResultRow(match=m, player1_rank=ranks.get(m.player1_id), player2_rank=ranks.get(m.player2_id))
        for m in completed
    ]

def player_summary(snapshot: LadderSnapshot, player: Player) -> PlayerSummary:
    played = [m for m in snapshot.matches if m.status == "completed" and m.involves(player.id)]
    wins = sum(1 for m in played if m.winner_id == player.id)
    upcoming = sum(1 for m in snapshot.matches if m.status == "scheduled" and m.involves(player.id))
    return PlayerSummary(
        player=player,
        matches_played=len(played),
        wins=wins,
        losses=len(played) - wins,
        upcoming=upcoming,
    )
