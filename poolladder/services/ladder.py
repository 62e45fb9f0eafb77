"""
In-memory ladder: players ordered by a dense rank and the matches played
between them.

Player and Match values are frozen; every mutation builds the replacement
values first and swaps them in at the end, so a failed operation never leaves
a half-applied change behind. All public methods run under one re-entrant
lock.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import date as Date, datetime, time as Time, timezone
from typing import Callable, Iterable

from poolladder.core.security import now_utc
from poolladder.services.errors import (
    DuplicateNameError,
    InvalidNameError,
    InvalidOrderError,
    InvalidScoreError,
    InvalidStateError,
    NotFoundError,
    SamePlayerError,
    TieScoreError,
)

logger = logging.getLogger(__name__)

PLAYER_STATUSES = ("active", "inactive", "suspended")
MATCH_STATUSES = ("scheduled", "completed")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Player:
    id: int
    name: str
    rank: int
    wins: int = 0
    losses: int = 0
    status: str = "active"
    created_at: datetime | None = None
    last_active_at: datetime | None = None

    @property
    def total_games(self) -> int:
        return self.wins + self.losses


@dataclass(frozen=True)
class Match:
    id: int
    player1_id: int
    player2_id: int
    player1_name: str = "Player 1"
    player2_name: str = "Player 2"
    status: str = "scheduled"
    date: Date | None = None
    time: Time | None = None
    player1_score: int | None = None
    player2_score: int | None = None
    winner_id: int | None = None
    loser_id: int | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def name_of(self, player_id: int | None) -> str | None:
        if player_id is None:
            return None
        if player_id == self.player1_id:
            return self.player1_name
        if player_id == self.player2_id:
            return self.player2_name
        return None

    @property
    def winner_name(self) -> str | None:
        return self.name_of(self.winner_id)

    @property
    def loser_name(self) -> str | None:
        return self.name_of(self.loser_id)


@dataclass(frozen=True)
class LadderSnapshot:
    players: tuple[Player, ...]  # ordered by rank
    matches: tuple[Match, ...]   # ordered by id
    next_player_id: int
    next_match_id: int

    def player(self, player_id: int) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)


def validate_scores(score1, score2) -> tuple[int, int]:
    for label, value in (("player1", score1), ("player2", score2)):
        if value is None:
            raise InvalidScoreError(f"{label} score is required")
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidScoreError(f"{label} score must be an integer")
        if value < 0:
            raise InvalidScoreError(f"{label} score must be 0 or higher")
    if score1 == score2:
        raise TieScoreError("A match cannot end in a tie")
    return score1, score2


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError("Player name is required")
    return name.strip()


def _join_order_key(player: Player):
    return (player.created_at is None, player.created_at or _EPOCH, player.id)


class LadderStore:
    """Owns the player and match collections and every rule that ties them together."""

    def __init__(
        self,
        players: Iterable[Player] = (),
        matches: Iterable[Match] = (),
        *,
        next_player_id: int | None = None,
        next_match_id: int | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._lock = threading.RLock()
        self._clock = clock
        self._players: dict[int, Player] = {}
        self._matches: dict[int, Match] = {}

        loaded: list[Player] = []
        names: set[str] = set()
        seen_ids: set[int] = set()
        for player in players:
            seen_ids.add(player.id)
            if player.id in self._players:
                logger.warning("Dropping duplicate player id %s (%s)", player.id, player.name)
                continue
            if player.name.casefold() in names:
                logger.warning("Dropping player %s: name %r is already taken", player.id, player.name)
                continue
            names.add(player.name.casefold())
            self._players[player.id] = player
            loaded.append(player)
        # Sort by stored rank, load order breaks ties, then densify.
        positions = {p.id: i for i, p in enumerate(loaded)}
        ordered = sorted(loaded, key=lambda p: (p.rank if p.rank > 0 else float("inf"), positions[p.id]))
        self._players.update(self._ranked(ordered))

        for match in matches:
            if match.id in self._matches:
                logger.warning("Dropping duplicate match id %s", match.id)
                continue
            self._matches[match.id] = match

        # ids of dropped records stay reserved
        self._next_player_id = max([next_player_id or 1, *(p + 1 for p in seen_ids)])
        self._next_match_id = max([next_match_id or 1, *(m + 1 for m in self._matches)])

    # -- reads -------------------------------------------------------------

    def players(self) -> tuple[Player, ...]:
        with self._lock:
            return tuple(self._ordered())

    def matches(self) -> tuple[Match, ...]:
        with self._lock:
            return tuple(self._matches[k] for k in sorted(self._matches))

    def get_player(self, player_id: int) -> Player:
        with self._lock:
            return self._player(player_id)

    def get_match(self, match_id: int) -> Match:
        with self._lock:
            return self._match(match_id)

    def snapshot(self) -> LadderSnapshot:
        with self._lock:
            return LadderSnapshot(
                players=tuple(self._ordered()),
                matches=tuple(self._matches[k] for k in sorted(self._matches)),
                next_player_id=self._next_player_id,
                next_match_id=self._next_match_id,
            )

    # -- players -----------------------------------------------------------

    def add_player(self, name: str) -> Player:
        with self._lock:
            name = _clean_name(name)
            self._assert_name_free(name)
            now = self._clock()
            player = Player(
                id=self._next_player_id,
                name=name,
                rank=len(self._players) + 1,
                created_at=now,
                last_active_at=now,
            )
            self._next_player_id += 1
            self._players[player.id] = player
            logger.info("Added player %s (%s) at rank %s", player.id, player.name, player.rank)
            return player

    def remove_player(self, player_id: int) -> None:
        with self._lock:
            player = self._player(player_id)
            remaining = [p for p in self._ordered() if p.id != player.id]
            del self._players[player.id]
            self._players.update(self._ranked(remaining))
            logger.info("Removed player %s (%s)", player.id, player.name)

    def rename_player(self, player_id: int, new_name: str) -> Player:
        with self._lock:
            player = self._player(player_id)
            new_name = _clean_name(new_name)
            if new_name == player.name:
                return player
            self._assert_name_free(new_name, exclude_id=player.id)

            renamed = replace(player, name=new_name)
            matches = {}
            for match in self._matches.values():
                if match.player1_id == player.id:
                    match = replace(match, player1_name=new_name)
                if match.player2_id == player.id:
                    match = replace(match, player2_name=new_name)
                matches[match.id] = match
            self._players[player.id] = renamed
            self._matches.update(matches)
            return renamed

    def set_player_status(self, player_id: int, status: str) -> Player:
        with self._lock:
            player = self._player(player_id)
            if status not in PLAYER_STATUSES:
                raise InvalidStateError(f"Unknown player status '{status}'")
            updated = replace(player, status=status)
            self._players[player.id] = updated
            return updated

    # -- ranks -------------------------------------------------------------

    def move_up(self, player_id: int) -> Player:
        with self._lock:
            return self._swap_with_neighbour(player_id, -1)

    def move_down(self, player_id: int) -> Player:
        with self._lock:
            return self._swap_with_neighbour(player_id, +1)

    def reorder(self, player_ids: Iterable[int]) -> tuple[Player, ...]:
        with self._lock:
            ids = list(player_ids)
            if len(ids) != len(set(ids)):
                raise InvalidOrderError("Order contains duplicate player ids")
            unknown = set(ids) - set(self._players)
            if unknown:
                raise InvalidOrderError(f"Order contains unknown player ids: {sorted(unknown)}")
            missing = set(self._players) - set(ids)
            if missing:
                raise InvalidOrderError(f"Order is missing player ids: {sorted(missing)}")

            self._players.update(self._ranked([self._players[i] for i in ids]))
            return tuple(self._ordered())

    def recalculate_by_record(self) -> tuple[Player, ...]:
        with self._lock:
            ordered = sorted(self._ordered(), key=lambda p: (-p.wins, p.losses))
            self._players.update(self._ranked(ordered))
            return tuple(self._ordered())

    def reset_all(self) -> tuple[Player, ...]:
        """Zero every record and rank players by the order they joined."""
        with self._lock:
            ordered = sorted(self._players.values(), key=_join_order_key)
            self._players.update(
                (p.id, replace(p, rank=i, wins=0, losses=0)) for i, p in enumerate(ordered, start=1)
            )
            logger.info("Reset ladder with %s players", len(ordered))
            return tuple(self._ordered())

    # -- matches -----------------------------------------------------------

    def schedule_match(self, player1_id: int, player2_id: int, date: Date, time: Time | None = None) -> Match:
        with self._lock:
            if player1_id == player2_id:
                raise SamePlayerError("A match needs two different players")
            player1 = self._player(player1_id)
            player2 = self._player(player2_id)
            match = Match(
                id=self._next_match_id,
                player1_id=player1.id,
                player2_id=player2.id,
                player1_name=player1.name,
                player2_name=player2.name,
                date=date,
                time=time,
                created_at=self._clock(),
            )
            self._next_match_id += 1
            self._matches[match.id] = match
            logger.info("Scheduled match %s: %s vs %s on %s", match.id, player1.name, player2.name, date)
            return match

    def cancel_match(self, match_id: int) -> None:
        with self._lock:
            match = self._match(match_id)
            if match.status != "scheduled":
                raise InvalidStateError("Only scheduled matches can be cancelled")
            del self._matches[match.id]

    def record_result(self, match_id: int, score1, score2) -> Match:
        with self._lock:
            match = self._match(match_id)
            if match.status != "scheduled":
                raise InvalidStateError("Result already recorded for this match")
            score1, score2 = validate_scores(score1, score2)
            now = self._clock()
            completed = self._completed(match, match.player1_id, match.player2_id, score1, score2, now)
            settled = self._settle({}, completed, now)

            self._players.update(settled)
            self._matches[completed.id] = completed
            logger.info(
                "Recorded match %s: %s-%s, winner %s", completed.id, score1, score2, completed.winner_id
            )
            return completed

    def edit_match(
        self,
        match_id: int,
        *,
        player1_id: int | None = None,
        player2_id: int | None = None,
        date: Date | None = None,
        time: Time | None = None,
        status: str | None = None,
        score1=None,
        score2=None,
    ) -> Match:
        """
        Re-assign participants, date, status or scores of a match.

        Win/loss records are corrected by difference: the settlement of the
        previous result is undone and the new one applied, so editing a
        completed match any number of times never double counts.
        """
        with self._lock:
            match = self._match(match_id)
            p1 = match.player1_id if player1_id is None else player1_id
            p2 = match.player2_id if player2_id is None else player2_id
            if p1 == p2:
                raise SamePlayerError("A match needs two different players")
            for pid in (p1, p2):
                if pid not in (match.player1_id, match.player2_id):
                    self._player(pid)

            scores_given = score1 is not None or score2 is not None
            if status is None:
                status = "completed" if scores_given else match.status
            if status not in MATCH_STATUSES:
                raise InvalidStateError(f"Unknown match status '{status}'")

            now = self._clock()
            edited = replace(
                match,
                player1_id=p1,
                player2_id=p2,
                player1_name=self._current_name(p1, match),
                player2_name=self._current_name(p2, match),
                date=match.date if date is None else date,
                time=match.time if time is None else time,
            )
            if status == "completed":
                if not scores_given and match.status == "completed":
                    score1, score2 = match.player1_score, match.player2_score
                score1, score2 = validate_scores(score1, score2)
                edited = self._completed(edited, p1, p2, score1, score2, match.completed_at or now)
            else:
                if scores_given:
                    raise InvalidStateError("Scores can only be set on a completed match")
                edited = replace(
                    edited,
                    status="scheduled",
                    player1_score=None,
                    player2_score=None,
                    winner_id=None,
                    loser_id=None,
                    completed_at=None,
                )

            deltas: dict[int, list[int]] = {}
            if match.status == "completed":
                deltas.setdefault(match.winner_id, [0, 0])[0] -= 1
                deltas.setdefault(match.loser_id, [0, 0])[1] -= 1
            settled = self._settle(deltas, edited if edited.status == "completed" else None, now)

            self._players.update(settled)
            self._matches[edited.id] = edited
            logger.info("Edited match %s (%s -> %s)", edited.id, match.status, edited.status)
            return edited

    # -- internals ---------------------------------------------------------

    def _player(self, player_id: int) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        return player

    def _match(self, match_id: int) -> Match:
        match = self._matches.get(match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def _ordered(self) -> list[Player]:
        return sorted(self._players.values(), key=lambda p: p.rank)

    @staticmethod
    def _ranked(ordered: list[Player]) -> dict[int, Player]:
        return {
            p.id: p if p.rank == i else replace(p, rank=i)
            for i, p in enumerate(ordered, start=1)
        }

    def _assert_name_free(self, name: str, exclude_id: int | None = None) -> None:
        folded = name.casefold()
        for other in self._players.values():
            if other.id != exclude_id and other.name.casefold() == folded:
                raise DuplicateNameError(f"Player with name '{other.name}' already exists")

    def _swap_with_neighbour(self, player_id: int, step: int) -> Player:
        player = self._player(player_id)
        target_rank = player.rank + step
        if target_rank < 1 or target_rank > len(self._players):
            return player
        neighbour = next(p for p in self._players.values() if p.rank == target_rank)
        moved = replace(player, rank=target_rank)
        self._players[player.id] = moved
        self._players[neighbour.id] = replace(neighbour, rank=player.rank)
        return moved

    def _current_name(self, player_id: int, match: Match) -> str:
        player = self._players.get(player_id)
        if player is not None:
            return player.name
        return match.name_of(player_id) or f"Player {player_id}"

    @staticmethod
    def _completed(match: Match, p1: int, p2: int, score1: int, score2: int, completed_at: datetime) -> Match:
        winner, loser = (p1, p2) if score1 > score2 else (p2, p1)
        return replace(
            match,
            status="completed",
            player1_score=score1,
            player2_score=score2,
            winner_id=winner,
            loser_id=loser,
            completed_at=completed_at,
        )

    def _settle(self, deltas: dict[int, list[int]], completed: Match | None, now: datetime) -> dict[int, Player]:
        """
        Build updated players for the given (wins, losses) deltas plus the
        settlement of `completed`. Nothing is written to the store here.
        """
        if completed is not None:
            deltas.setdefault(completed.winner_id, [0, 0])[0] += 1
            deltas.setdefault(completed.loser_id, [0, 0])[1] += 1

        updated: dict[int, Player] = {}
        for pid, (d_wins, d_losses) in deltas.items():
            if d_wins == 0 and d_losses == 0:
                continue
            player = self._players.get(pid)
            if player is None:
                if d_wins > 0 or d_losses > 0:
                    raise NotFoundError(f"Player {pid} not found")
                # Undoing a result for a removed player has nothing to correct.
                continue
            updated[pid] = replace(
                player,
                wins=max(0, player.wins + d_wins),
                losses=max(0, player.losses + d_losses),
                last_active_at=now,
            )
        return updated
