import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from poolladder.db.base import Base

class PlayerRow(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    rank: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    wins: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    losses: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")
    status: Mapped[str] = mapped_column(sa.Text, nullable=False, server_default="active")  # active/inactive/suspended

    created_at: Mapped[sa.DateTime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    last_active: Mapped[sa.DateTime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        sa.Index("ix_players_rank", "rank"),
        sa.CheckConstraint("status in ('active','inactive','suspended')", name="ck_player_status"),
        sa.CheckConstraint("wins >= 0 AND losses >= 0", name="ck_player_record"),
    )
