import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from poolladder.db.base import Base

class MatchRow(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=False)
    status: Mapped[str] = mapped_column(sa.Text, nullable=False, server_default="scheduled")  # scheduled/completed

    # no foreign keys: completed matches outlive removed players
    player1_id: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    player1_name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    player2_id: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    player2_name: Mapped[str] = mapped_column(sa.Text, nullable=False)

    match_date: Mapped[sa.Date | None] = mapped_column(sa.Date, nullable=True)
    match_time: Mapped[sa.Time | None] = mapped_column(sa.Time, nullable=True)

    player1_score: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    player2_score: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    winner_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    loser_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)

    created_at: Mapped[sa.DateTime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    completed_at: Mapped[sa.DateTime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        sa.Index("ix_matches_status_date", "status", "match_date"),
        sa.CheckConstraint("status in ('scheduled','completed')", name="ck_match_status"),
        sa.CheckConstraint("player1_id <> player2_id", name="ck_match_distinct_players"),
    )
