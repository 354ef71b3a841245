"""Repository Protocol: dependency inversion for testability."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_wager.domain.models import Bet, BetHistoryItem


class BetRepositoryProtocol(Protocol):
    async def insert_bet(self, db: AsyncSession, bet: Bet) -> Bet: ...

    async def get_active_bet(
        self, db: AsyncSession, user_id: str, event_id: str
    ) -> Bet | None: ...

    async def list_user_bets(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[BetHistoryItem]: ...

    async def list_active_bets_for_update(
        self, db: AsyncSession, event_id: str
    ) -> list[Bet]: ...

    async def mark_won(
        self, db: AsyncSession, bet_id: str, winnings: int, resolved_at: datetime
    ) -> None: ...

    async def mark_lost(
        self, db: AsyncSession, bet_id: str, resolved_at: datetime
    ) -> None: ...
