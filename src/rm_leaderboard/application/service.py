"""LeaderboardService: ranks active users by points, wins, winnings or this month's winnings."""

from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.datetime_utils import start_of_month, utc_now
from src.rm_common.enums import LeaderboardType
from src.rm_common.points import format_points
from src.rm_leaderboard.application.schemas import LeaderboardEntryOut, LeaderboardResponse
from src.rm_leaderboard.domain.models import LeaderboardRow
from src.rm_leaderboard.infrastructure.persistence import LeaderboardRepository

MAX_LIMIT = 100


def win_rate(wins: int, total_bets: int) -> float:
    """Percentage of won bets, one decimal, half-up: 1 of 3 -> 33.3, 2 of 3 -> 66.7."""
    if total_bets <= 0:
        return 0.0
    rate = Decimal(wins * 100) / Decimal(total_bets)
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _to_entry(rank: int, row: LeaderboardRow) -> LeaderboardEntryOut:
    return LeaderboardEntryOut(
        rank=rank,
        user_id=row.user_id,
        username=row.username,
        points=row.points,
        formatted_points=format_points(row.points),
        total_bets=row.total_bets,
        wins=row.wins,
        winnings=row.winnings,
        formatted_winnings=format_points(row.winnings),
        win_rate=win_rate(row.wins, row.total_bets),
        wagered=row.wagered,
        profit=row.winnings - row.wagered,
    )


class LeaderboardService:
    def __init__(
        self,
        repo: LeaderboardRepository | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo = repo or LeaderboardRepository()
        self._clock = clock

    async def get_leaderboard(
        self,
        db: AsyncSession,
        board: LeaderboardType,
        limit: int,
        offset: int,
    ) -> LeaderboardResponse:
        limit = max(1, min(limit, MAX_LIMIT))
        offset = max(offset, 0)
        since = period = None
        if board == LeaderboardType.MONTHLY:
            since = start_of_month(self._clock())
            period = since.strftime("%Y-%m")
        rows = await self._repo.fetch(db, board, limit, offset, since)
        items = [_to_entry(offset + i + 1, row) for i, row in enumerate(rows)]
        return LeaderboardResponse(type=board.value, period=period, items=items)
