from sqlalchemy.orm import Session
from poolladder.models.audit_log import AuditLog

def audit_snapshot(db: Session, meta: dict, action: str = "snapshot_saved", actor: str | None = None) -> AuditLog:
    row = AuditLog(
        action=action,
        actor=actor,
        player_count=meta.get("playerCount", 0),
        match_count=meta.get("matchCount", 0),
        next_player_id=meta.get("nextPlayerId"),
        next_match_id=meta.get("nextMatchId"),
    )
    db.add(row)
    return row
