"""LeaderboardRepository: read-only ranking queries over active users.

Every query returns the same column set so one mapper serves all board
types. The monthly board only counts bets placed since :since.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.enums import LeaderboardType
from src.rm_leaderboard.domain.models import LeaderboardRow

_SELECT = """
    SELECT u.id::text AS user_id,
           u.username,
           a.balance AS points,
           COUNT(b.id) AS total_bets,
           COUNT(b.id) FILTER (WHERE b.status = 'WON') AS wins,
           COALESCE(SUM(b.actual_winnings) FILTER (WHERE b.status = 'WON'), 0) AS winnings,
           COALESCE(SUM(b.amount), 0) AS wagered
    FROM users u
    JOIN accounts a ON a.user_id = u.id::text
"""

_GROUP = "GROUP BY u.id, u.username, a.balance"

_LEADERBOARD_SQL = {
    LeaderboardType.POINTS: text(f"""
        {_SELECT}
        LEFT JOIN bets b ON b.user_id = a.user_id
        WHERE u.is_active
        {_GROUP}
        ORDER BY a.balance DESC, u.username ASC
        LIMIT :limit OFFSET :offset
    """),
    LeaderboardType.WINS: text(f"""
        {_SELECT}
        LEFT JOIN bets b ON b.user_id = a.user_id
        WHERE u.is_active
        {_GROUP}
        HAVING COUNT(b.id) FILTER (WHERE b.status = 'WON') > 0
        ORDER BY wins DESC, a.balance DESC, u.username ASC
        LIMIT :limit OFFSET :offset
    """),
    LeaderboardType.WINNINGS: text(f"""
        {_SELECT}
        LEFT JOIN bets b ON b.user_id = a.user_id
        WHERE u.is_active
        {_GROUP}
        HAVING COALESCE(SUM(b.actual_winnings) FILTER (WHERE b.status = 'WON'), 0) > 0
        ORDER BY winnings DESC, a.balance DESC, u.username ASC
        LIMIT :limit OFFSET :offset
    """),
    LeaderboardType.MONTHLY: text(f"""
        {_SELECT}
        LEFT JOIN bets b ON b.user_id = a.user_id AND b.placed_at >= :since
        WHERE u.is_active
        {_GROUP}
        HAVING COUNT(b.id) > 0
        ORDER BY winnings DESC, a.balance DESC, u.username ASC
        LIMIT :limit OFFSET :offset
    """),
}


def _row_to_entry(row: object) -> LeaderboardRow:
    return LeaderboardRow(
        user_id=row.user_id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        points=row.points,  # type: ignore[attr-defined]
        total_bets=int(row.total_bets),  # type: ignore[attr-defined]
        wins=int(row.wins),  # type: ignore[attr-defined]
        winnings=int(row.winnings),  # type: ignore[attr-defined]
        wagered=int(row.wagered),  # type: ignore[attr-defined]
    )


class LeaderboardRepository:
    async def fetch(
        self,
        db: AsyncSession,
        board: LeaderboardType,
        limit: int,
        offset: int,
        since: datetime | None = None,
    ) -> list[LeaderboardRow]:
        params: dict[str, object] = {"limit": limit, "offset": offset}
        if board == LeaderboardType.MONTHLY:
            params["since"] = since
        result = await db.execute(_LEADERBOARD_SQL[board], params)
        return [_row_to_entry(row) for row in result.fetchall()]
