import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from poolladder.db.base import Base

class AuditLog(Base):
    """One row per persisted ladder snapshot."""
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(sa.Text, nullable=False)  # snapshot_saved
    actor: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    player_count: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    match_count: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    next_player_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    next_match_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)

    saved_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    __table_args__ = (
        sa.Index("ix_audit_saved_at", "saved_at"),
    )
