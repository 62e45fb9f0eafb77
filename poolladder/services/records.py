"""
Conversion between stored/published records and ladder values.

Records arrive from several sources with different field names
(``player1.id`` / ``player1_id`` / ``player1Id``, ``created`` /
``created_at`` / ``createdAt`` ...). Everything is normalized here, once,
before it reaches the store; records that cannot be resolved are dropped.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Any, Mapping

from poolladder.core.security import now_utc
from poolladder.services.ladder import (
    MATCH_STATUSES,
    PLAYER_STATUSES,
    LadderSnapshot,
    LadderStore,
    Match,
    Player,
)

logger = logging.getLogger(__name__)

_MISSING = object()


def _first(raw: Mapping[str, Any], *keys: str):
    for key in keys:
        value = raw.get(key, _MISSING)
        if value is not _MISSING and value is not None and value != "":
            return value
    return None


def _nested(raw: Mapping[str, Any], key: str, field: str):
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value.get(field)
    return None


def _participant_id(raw: Mapping[str, Any], key: str) -> int | None:
    value = _nested(raw, key, "id")
    if value is None:
        value = _first(raw, f"{key}_id", f"{key}Id")
    return coerce_int(value)


def coerce_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


def coerce_count(value) -> int:
    out = coerce_int(value)
    return out if out is not None and out > 0 else 0


def coerce_score(value) -> int | None:
    out = coerce_int(value)
    if out is None or out < 0:
        return None
    return out


def parse_timestamp(value) -> datetime | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        out = value
    elif isinstance(value, (int, float)):
        # epoch milliseconds
        try:
            out = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            out = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if out.tzinfo is None:
        out = out.replace(tzinfo=timezone.utc)
    return out.astimezone(timezone.utc)


def parse_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def parse_time(value) -> time | None:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -- inbound ---------------------------------------------------------------

def normalize_player_record(raw) -> Player | None:
    if not isinstance(raw, Mapping):
        return None
    player_id = coerce_int(raw.get("id"))
    name = raw.get("name")
    if player_id is None or not isinstance(name, str) or not name.strip():
        return None

    status = raw.get("status")
    if not isinstance(status, str) or status.lower() not in PLAYER_STATUSES:
        status = "active"

    return Player(
        id=player_id,
        name=name.strip(),
        rank=coerce_count(raw.get("rank")),
        wins=coerce_count(raw.get("wins")),
        losses=coerce_count(raw.get("losses")),
        status=status.lower(),
        created_at=parse_timestamp(_first(raw, "createdAt", "created_at", "created")),
        last_active_at=parse_timestamp(_first(raw, "lastActiveAt", "lastActive", "last_active")),
    )


def _played_at(match: Match) -> datetime | None:
    if match.date is not None:
        return datetime.combine(match.date, match.time or time(0, 0), tzinfo=timezone.utc)
    return match.created_at


def normalize_match_record(raw) -> Match | None:
    if not isinstance(raw, Mapping):
        return None
    match_id = coerce_int(raw.get("id"))
    if match_id is None:
        return None

    player1_id = _participant_id(raw, "player1")
    player2_id = _participant_id(raw, "player2")
    if player1_id is None or player2_id is None or player1_id == player2_id:
        return None

    status = raw.get("status") or "scheduled"
    if not isinstance(status, str) or status.lower() not in MATCH_STATUSES:
        return None
    status = status.lower()

    player1_name = _nested(raw, "player1", "name") or _first(raw, "player1_name", "player1Name") or "Player 1"
    player2_name = _nested(raw, "player2", "name") or _first(raw, "player2_name", "player2Name") or "Player 2"

    match = Match(
        id=match_id,
        player1_id=player1_id,
        player2_id=player2_id,
        player1_name=str(player1_name),
        player2_name=str(player2_name),
        status=status,
        date=parse_date(_first(raw, "date", "match_date", "scheduledAt", "scheduled_at")),
        time=parse_time(_first(raw, "time", "match_time")),
        created_at=parse_timestamp(_first(raw, "createdAt", "created_at", "created")),
    )
    if status == "scheduled":
        return match

    score1 = coerce_score(_first(raw, "player1Score", "player1_score"))
    score2 = coerce_score(_first(raw, "player2Score", "player2_score"))
    if score1 is None or score2 is None or score1 == score2:
        return None
    winner, loser = (player1_id, player2_id) if score1 > score2 else (player2_id, player1_id)
    completed_at = parse_timestamp(_first(raw, "completedAt", "completed_at", "completedDate"))
    if completed_at is None:
        # older records only carry the match day
        completed_at = _played_at(match)
    return replace(
        match,
        player1_score=score1,
        player2_score=score2,
        winner_id=winner,
        loser_id=loser,
        completed_at=completed_at,
    )


def _normalize_all(rows, normalize, kind: str) -> list:
    out = []
    if not isinstance(rows, list):
        return out
    for raw in rows:
        value = normalize(raw)
        if value is None:
            logger.warning("Dropping unresolvable %s record: %r", kind, raw)
            continue
        out.append(value)
    return out


def store_from_records(players_raw, matches_raw, meta: Mapping[str, Any] | None = None, **kwargs) -> LadderStore:
    """Normalize a whole load batch and build a store from it."""
    meta = meta if isinstance(meta, Mapping) else {}
    return LadderStore(
        _normalize_all(players_raw, normalize_player_record, "player"),
        _normalize_all(matches_raw, normalize_match_record, "match"),
        next_player_id=coerce_int(meta.get("nextPlayerId")),
        next_match_id=coerce_int(meta.get("nextMatchId")),
        **kwargs,
    )


# -- outbound --------------------------------------------------------------

def player_to_record(player: Player) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "rank": player.rank,
        "wins": player.wins,
        "losses": player.losses,
        "status": player.status,
        "createdAt": format_timestamp(player.created_at),
        "lastActiveAt": format_timestamp(player.last_active_at),
    }


def match_to_record(match: Match) -> dict:
    return {
        "id": match.id,
        "status": match.status,
        "player1": {"id": match.player1_id, "name": match.player1_name},
        "player2": {"id": match.player2_id, "name": match.player2_name},
        "date": match.date.isoformat() if match.date else None,
        "time": match.time.isoformat() if match.time else None,
        "player1Score": match.player1_score,
        "player2Score": match.player2_score,
        "winnerId": match.winner_id,
        "winnerName": match.winner_name,
        "loserId": match.loser_id,
        "loserName": match.loser_name,
        "createdAt": format_timestamp(match.created_at),
        "completedAt": format_timestamp(match.completed_at),
    }


def snapshot_meta(snapshot: LadderSnapshot, updated: datetime | None = None) -> dict:
    return {
        "updated": format_timestamp(updated or now_utc()),
        "nextPlayerId": snapshot.next_player_id,
        "nextMatchId": snapshot.next_match_id,
        "playerCount": len(snapshot.players),
        "matchCount": len(snapshot.matches),
    }


def snapshot_to_records(snapshot: LadderSnapshot) -> tuple[list[dict], list[dict], dict]:
    return (
        [player_to_record(p) for p in snapshot.players],
        [match_to_record(m) for m in snapshot.matches],
        snapshot_meta(snapshot),
    )
