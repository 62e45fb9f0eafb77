from dataclasses import replace
from datetime import date, datetime, time, timezone

import pytest

from poolladder.services.ladder import LadderSnapshot, Match, Player
from poolladder.services.standings import (
    player_summary,
    results,
    schedule,
    standings,
    tier_for_rank,
    trend_for,
    win_rate,
)


@pytest.mark.parametrize("wins,losses,expected", [(0, 0, 0), (1, 1, 50), (2, 1, 67), (1, 2, 33), (1, 7, 13), (5, 0, 100)])
def test_win_rate_rounds_half_up(wins, losses, expected):
    assert win_rate(wins, losses) == expected


@pytest.mark.parametrize("rank,tier", [(1, "champion"), (3, "champion"), (4, "contender"), (7, "challenger"), (11, "regular")])
def test_tier_for_rank(rank, tier):
    assert tier_for_rank(rank) == tier


@pytest.mark.parametrize(
    "rank,wins,losses,trend",
    [
        (1, 2, 0, None),  # too few games
        (8, 3, 0, "hot"),
        (1, 0, 3, "cold"),
        (2, 2, 2, "rising"),
        (7, 2, 2, None),
    ],
)
def test_trend_for(rank, wins, losses, trend):
    assert trend_for(Player(id=1, name="A", rank=rank, wins=wins, losses=losses)) == trend


def completed(mid, p1, p2, s1, s2, on):
    winner, loser = (p1, p2) if s1 > s2 else (p2, p1)
    return Match(
        id=mid, player1_id=p1, player2_id=p2, status="completed", date=on,
        player1_score=s1, player2_score=s2, winner_id=winner, loser_id=loser,
    )


@pytest.fixture
def snapshot():
    players = (
        Player(id=1, name="A", rank=1, wins=2, losses=0),
        Player(id=2, name="B", rank=2, wins=0, losses=1, status="inactive"),
        Player(id=3, name="C", rank=3, wins=0, losses=1),
    )
    matches = (
        completed(1, 1, 2, 3, 0, date(2025, 1, 5)),
        completed(2, 3, 1, 1, 3, date(2025, 1, 12)),
        Match(id=3, player1_id=2, player2_id=3, date=date(2025, 2, 1), time=time(20, 0)),
        Match(id=4, player1_id=1, player2_id=3, date=date(2025, 2, 1), time=time(18, 0)),
        Match(id=5, player1_id=1, player2_id=2, date=date(2025, 1, 20)),
    )
    return LadderSnapshot(players=players, matches=matches, next_player_id=4, next_match_id=6)


def test_standings_follow_rank_and_filter_by_status(snapshot):
    rows = standings(snapshot)
    assert [r.player.name for r in rows] == ["A", "B", "C"]
    assert (rows[0].win_rate, rows[0].total_games, rows[0].tier) == (100, 2, "champion")

    active = standings(snapshot, status="active")
    assert [r.player.name for r in active] == ["A", "C"]


def test_schedule_is_soonest_first(snapshot):
    assert [m.id for m in schedule(snapshot)] == [5, 4, 3]


def test_results_are_newest_first_with_current_ranks(snapshot):
    rows = results(snapshot)
    assert [r.match.id for r in rows] == [2, 1]
    assert (rows[0].player1_rank, rows[0].player2_rank) == (3, 1)

    assert [r.match.id for r in results(snapshot, player_id=2)] == [1]


def test_results_keep_removed_players_without_rank(snapshot):
    trimmed = LadderSnapshot(
        players=snapshot.players[:1], matches=snapshot.matches, next_player_id=4, next_match_id=6
    )
    row = results(trimmed)[0]
    assert row.player1_rank is None and row.player2_rank == 1


def test_player_summary(snapshot):
    summary = player_summary(snapshot, snapshot.player(1))
    assert (summary.matches_played, summary.wins, summary.losses, summary.upcoming) == (2, 2, 0, 2)

    summary = player_summary(snapshot, snapshot.player(3))
    assert (summary.matches_played, summary.wins, summary.losses, summary.upcoming) == (1, 0, 1, 2)


def test_standings_search_is_case_insensitive(snapshot):
    assert [r.player.name for r in standings(snapshot, search=" c ")] == ["C"]
    assert [r.player.name for r in standings(snapshot, search="a", status="active")] == ["A"]
    assert standings(snapshot, search="zz") == []


def test_standings_sorts_fall_back_to_rank():
    players = (
        Player(id=1, name="P1", rank=1, wins=1, losses=3),
        Player(id=2, name="P2", rank=2, wins=3, losses=3),
        Player(id=3, name="P3", rank=3, wins=3, losses=1),
        Player(id=4, name="P4", rank=4),
    )
    snap = LadderSnapshot(players=players, matches=(), next_player_id=5, next_match_id=1)

    assert [r.player.id for r in standings(snap, sort="wins")] == [2, 3, 1, 4]
    assert [r.player.id for r in standings(snap, sort="win_rate")] == [3, 2, 1, 4]
    assert [r.player.id for r in standings(snap, sort="rank")] == [1, 2, 3, 4]

    with pytest.raises(ValueError):
        standings(snap, sort="name")


@pytest.fixture
def named(snapshot):
    names = {p.id: p.name for p in snapshot.players}
    matches = tuple(
        replace(m, player1_name=f"{names[m.player1_id]} Smith", player2_name=f"{names[m.player2_id]} Jones")
        for m in snapshot.matches
    )
    return replace(snapshot, matches=matches)


def test_results_search_matches_either_player(named):
    assert [r.match.id for r in results(named, search="c smith")] == [2]
    assert [r.match.id for r in results(named, search="JONES")] == [2, 1]
    assert results(named, search="nobody") == []


def test_results_since_days_uses_match_day_without_completed_at(named):
    now = datetime(2025, 1, 14, tzinfo=timezone.utc)

    assert [r.match.id for r in results(named, since_days=7, now=now)] == [2]
    assert [r.match.id for r in results(named, since_days=30, now=now)] == [2, 1]

    stamped = replace(
        named,
        matches=(replace(named.matches[0], completed_at=datetime(2025, 1, 13, tzinfo=timezone.utc)),)
        + named.matches[1:],
    )
    assert [r.match.id for r in results(stamped, since_days=7, now=now)] == [2, 1]
