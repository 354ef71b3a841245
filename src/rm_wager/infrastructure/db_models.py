"""SQLAlchemy ORM model for the bets table.

Used for type reference only: persistence.py uses raw text() SQL.
Alembic migration 005_create_bets.py is the authoritative DDL source,
including the partial unique index on (user_id, event_id) WHERE status = 'ACTIVE'.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.rm_common.database import Base


class BetORM(Base):
    __tablename__ = "bets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.user_id"), nullable=False
    )
    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=False
    )
    option_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("event_options.id"), nullable=False
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    odds: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    potential_payout: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    actual_winnings: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    placed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
