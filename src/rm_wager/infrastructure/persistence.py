"""BetRepository: raw SQL persistence for the bets table.

Bets are never deleted. Status moves ACTIVE -> WON | LOST exactly once,
inside the resolution transaction, and the UPDATEs below only touch
ACTIVE rows.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.errors import StorageError
from src.rm_wager.domain.models import Bet, BetHistoryItem

_BET_COLUMNS = """
    b.id, b.user_id, b.event_id, b.option_id, b.amount, b.odds,
    b.potential_payout, b.status, b.actual_winnings, b.placed_at, b.resolved_at
"""

_INSERT_BET_SQL = text("""
    INSERT INTO bets
        (id, user_id, event_id, option_id, amount, odds,
         potential_payout, status, actual_winnings, placed_at)
    VALUES
        (:id, :user_id, :event_id, :option_id, :amount, :odds,
         :potential_payout, 'ACTIVE', 0, :placed_at)
    RETURNING id, user_id, event_id, option_id, amount, odds,
              potential_payout, status, actual_winnings, placed_at, resolved_at
""")

_GET_ACTIVE_BET_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets b
    WHERE b.user_id = :user_id AND b.event_id = :event_id AND b.status = 'ACTIVE'
""")

_LIST_USER_BETS_SQL = text(f"""
    SELECT {_BET_COLUMNS},
           e.title AS event_title, e.status AS event_status,
           o.label AS option_label
    FROM bets b
    JOIN events e ON e.id = b.event_id
    JOIN event_options o ON o.id = b.option_id
    WHERE b.user_id = :user_id
      AND (CAST(:status AS TEXT) IS NULL OR b.status = CAST(:status AS TEXT))
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR b.placed_at < CAST(:cursor_ts AS TIMESTAMPTZ)
          OR (
              b.placed_at = CAST(:cursor_ts AS TIMESTAMPTZ)
              AND b.id < CAST(:cursor_id AS TEXT)
          )
      )
    ORDER BY b.placed_at DESC, b.id DESC
    LIMIT :limit
""")

_LIST_ACTIVE_BETS_FOR_UPDATE_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets b
    WHERE b.event_id = :event_id AND b.status = 'ACTIVE'
    ORDER BY b.user_id ASC, b.id ASC
    FOR UPDATE
""")

_MARK_WON_SQL = text("""
    UPDATE bets
    SET status = 'WON', actual_winnings = :winnings, resolved_at = :resolved_at
    WHERE id = :bet_id AND status = 'ACTIVE'
""")

_MARK_LOST_SQL = text("""
    UPDATE bets
    SET status = 'LOST', actual_winnings = 0, resolved_at = :resolved_at
    WHERE id = :bet_id AND status = 'ACTIVE'
""")


def _row_to_bet(row: object) -> Bet:
    return Bet(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        option_id=row.option_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        odds=row.odds,  # type: ignore[attr-defined]
        potential_payout=row.potential_payout,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        actual_winnings=row.actual_winnings,  # type: ignore[attr-defined]
        placed_at=row.placed_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


class BetRepository:
    async def insert_bet(self, db: AsyncSession, bet: Bet) -> Bet:
        result = await db.execute(
            _INSERT_BET_SQL,
            {
                "id": bet.id,
                "user_id": bet.user_id,
                "event_id": bet.event_id,
                "option_id": bet.option_id,
                "amount": bet.amount,
                "odds": bet.odds,
                "potential_payout": bet.potential_payout,
                "placed_at": bet.placed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise StorageError("Bet insert returned no rows: this should never happen")
        return _row_to_bet(row)

    async def get_active_bet(
        self, db: AsyncSession, user_id: str, event_id: str
    ) -> Bet | None:
        result = await db.execute(
            _GET_ACTIVE_BET_SQL, {"user_id": user_id, "event_id": event_id}
        )
        row = result.fetchone()
        return _row_to_bet(row) if row else None

    async def list_user_bets(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[BetHistoryItem]:
        result = await db.execute(
            _LIST_USER_BETS_SQL,
            {
                "user_id": user_id,
                "status": status,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [
            BetHistoryItem(
                bet=_row_to_bet(row),
                event_title=row.event_title,
                event_status=row.event_status,
                option_label=row.option_label,
            )
            for row in result.fetchall()
        ]

    async def list_active_bets_for_update(
        self, db: AsyncSession, event_id: str
    ) -> list[Bet]:
        result = await db.execute(_LIST_ACTIVE_BETS_FOR_UPDATE_SQL, {"event_id": event_id})
        return [_row_to_bet(row) for row in result.fetchall()]

    async def mark_won(
        self, db: AsyncSession, bet_id: str, winnings: int, resolved_at: datetime
    ) -> None:
        await db.execute(
            _MARK_WON_SQL,
            {"bet_id": bet_id, "winnings": winnings, "resolved_at": resolved_at},
        )

    async def mark_lost(
        self, db: AsyncSession, bet_id: str, resolved_at: datetime
    ) -> None:
        await db.execute(_MARK_LOST_SQL, {"bet_id": bet_id, "resolved_at": resolved_at})
