import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from poolladder.db.base import Base

class LadderMeta(Base):
    __tablename__ = "ladder_meta"

    key: Mapped[str] = mapped_column(sa.Text, primary_key=True)  # nextPlayerId/nextMatchId/updated
    value: Mapped[dict] = mapped_column(sa.JSON, nullable=False)
