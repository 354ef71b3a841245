"""EventRepository: concrete implementation of EventRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Row locks: place_bet reads the event FOR SHARE, resolve_event reads it
FOR UPDATE, so a resolution waits for in-flight placements on the same
event and placements started afterwards see status RESOLVED.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_catalog.domain.models import Event, EventOption, EventSummary

# ---------------------------------------------------------------------------
# SQL: events
# ---------------------------------------------------------------------------

_EVENT_COLUMNS = """
    id, title, description, category, start_time, end_time,
    min_stake, max_stake, status, winning_option_id, resolved_at,
    created_by, created_at, updated_at
"""

_INSERT_EVENT_SQL = text("""
    INSERT INTO events
        (id, title, description, category, start_time, end_time,
         min_stake, max_stake, status, created_by)
    VALUES
        (:id, :title, :description, :category, :start_time, :end_time,
         :min_stake, :max_stake, :status, :created_by)
""")

_GET_EVENT_SQL = {
    None: text(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id"),
    "SHARE": text(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id FOR SHARE"),
    "UPDATE": text(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id FOR UPDATE"),
}

_LIST_EVENTS_SQL = text(f"""
    SELECT {_EVENT_COLUMNS},
           COALESCE(s.bet_count, 0) AS bet_count,
           COALESCE(s.total_staked, 0) AS total_staked
    FROM events e
    LEFT JOIN (
        SELECT event_id, COUNT(*) AS bet_count, SUM(amount) AS total_staked
        FROM bets
        GROUP BY event_id
    ) s ON s.event_id = e.id
    WHERE
        (CAST(:status AS TEXT) IS NULL OR e.status = CAST(:status AS TEXT))
        AND (CAST(:category AS TEXT) IS NULL OR e.category = CAST(:category AS TEXT))
    ORDER BY e.start_time ASC, e.created_at DESC
    LIMIT :limit
""")

_EVENT_STATS_SQL = text("""
    SELECT COUNT(*) AS bet_count, COALESCE(SUM(amount), 0) AS total_staked
    FROM bets
    WHERE event_id = :event_id
""")

_UPDATE_STATUS_SQL = text("""
    UPDATE events
    SET status = :status, updated_at = NOW()
    WHERE id = :event_id
""")

_COUNT_BETS_SQL = text("SELECT COUNT(*) FROM bets WHERE event_id = :event_id")

_DELETE_OPTIONS_SQL = text("DELETE FROM event_options WHERE event_id = :event_id")

_DELETE_EVENT_SQL = text("DELETE FROM events WHERE id = :event_id")

_MARK_RESOLVED_SQL = text("""
    UPDATE events
    SET status = 'RESOLVED',
        winning_option_id = :winning_option_id,
        resolved_at = :resolved_at,
        updated_at = NOW()
    WHERE id = :event_id
""")

# ---------------------------------------------------------------------------
# SQL: event_options
# ---------------------------------------------------------------------------

_INSERT_OPTION_SQL = text("""
    INSERT INTO event_options (id, event_id, label, odds, position, is_winning)
    VALUES (:id, :event_id, :label, :odds, :position, FALSE)
""")

_LIST_OPTIONS_SQL = text("""
    SELECT id, event_id, label, odds, position, is_winning
    FROM event_options
    WHERE event_id = ANY(CAST(:event_ids AS TEXT[]))
    ORDER BY event_id, odds ASC, position ASC
""")

_MARK_WINNING_OPTION_SQL = text("""
    UPDATE event_options
    SET is_winning = (id = :winning_option_id)
    WHERE event_id = :event_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_event(row: object) -> Event:
    return Event(
        id=row.id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        min_stake=row.min_stake,  # type: ignore[attr-defined]
        max_stake=row.max_stake,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        winning_option_id=row.winning_option_id,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_option(row: object) -> EventOption:
    return EventOption(
        id=row.id,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        label=row.label,  # type: ignore[attr-defined]
        odds=row.odds,  # type: ignore[attr-defined]
        position=row.position,  # type: ignore[attr-defined]
        is_winning=row.is_winning,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class EventRepository:
    """Concrete repository. Transaction ownership stays with the caller."""

    async def insert_event(self, db: AsyncSession, event: Event) -> None:
        await db.execute(
            _INSERT_EVENT_SQL,
            {
                "id": event.id,
                "title": event.title,
                "description": event.description,
                "category": event.category,
                "start_time": event.start_time,
                "end_time": event.end_time,
                "min_stake": event.min_stake,
                "max_stake": event.max_stake,
                "status": event.status,
                "created_by": event.created_by,
            },
        )
        for option in event.options:
            await db.execute(
                _INSERT_OPTION_SQL,
                {
                    "id": option.id,
                    "event_id": event.id,
                    "label": option.label,
                    "odds": option.odds,
                    "position": option.position,
                },
            )

    async def get_event(
        self, db: AsyncSession, event_id: str, lock: str | None = None
    ) -> Event | None:
        """Load an event with its options. lock: None, "SHARE" or "UPDATE"."""
        result = await db.execute(_GET_EVENT_SQL[lock], {"event_id": event_id})
        row = result.fetchone()
        if row is None:
            return None
        event = _row_to_event(row)
        options = await self._load_options(db, [event.id])
        event.options = options.get(event.id, [])
        return event

    async def list_events(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        limit: int,
    ) -> list[EventSummary]:
        result = await db.execute(
            _LIST_EVENTS_SQL,
            {"status": status, "category": category, "limit": limit},
        )
        rows = result.fetchall()
        summaries = [
            EventSummary(
                event=_row_to_event(row),
                bet_count=int(row.bet_count),
                total_staked=int(row.total_staked),
            )
            for row in rows
        ]
        if summaries:
            options = await self._load_options(db, [s.event.id for s in summaries])
            for summary in summaries:
                summary.event.options = options.get(summary.event.id, [])
        return summaries

    async def get_event_stats(self, db: AsyncSession, event_id: str) -> tuple[int, int]:
        """(bet_count, total_staked) across all bets on the event."""
        result = await db.execute(_EVENT_STATS_SQL, {"event_id": event_id})
        row = result.fetchone()
        if row is None:
            return 0, 0
        return int(row.bet_count), int(row.total_staked)

    async def update_status(self, db: AsyncSession, event_id: str, status: str) -> None:
        await db.execute(_UPDATE_STATUS_SQL, {"event_id": event_id, "status": status})

    async def count_bets(self, db: AsyncSession, event_id: str) -> int:
        result = await db.execute(_COUNT_BETS_SQL, {"event_id": event_id})
        return int(result.scalar_one())

    async def delete_event(self, db: AsyncSession, event_id: str) -> None:
        await db.execute(_DELETE_OPTIONS_SQL, {"event_id": event_id})
        await db.execute(_DELETE_EVENT_SQL, {"event_id": event_id})

    async def mark_resolved(
        self,
        db: AsyncSession,
        event_id: str,
        winning_option_id: str,
        resolved_at: datetime,
    ) -> None:
        params = {"event_id": event_id, "winning_option_id": winning_option_id}
        await db.execute(_MARK_RESOLVED_SQL, {**params, "resolved_at": resolved_at})
        await db.execute(_MARK_WINNING_OPTION_SQL, params)

    async def _load_options(
        self, db: AsyncSession, event_ids: list[str]
    ) -> dict[str, list[EventOption]]:
        result = await db.execute(_LIST_OPTIONS_SQL, {"event_ids": event_ids})
        grouped: dict[str, list[EventOption]] = {}
        for row in result.fetchall():
            option = _row_to_option(row)
            grouped.setdefault(option.event_id, []).append(option)
        return grouped
