"""Unit tests for EventRepository using MagicMock AsyncSession."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rm_catalog.infrastructure.persistence import EventRepository


def _make_event_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "EVT-1")
    row.title = kwargs.get("title", "Kollegah vs. Farid Bang")
    row.description = "Who wins the battle?"
    row.category = "battle"
    row.start_time = datetime(2026, 10, 18, tzinfo=UTC)
    row.end_time = datetime(2026, 10, 25, tzinfo=UTC)
    row.min_stake = 10
    row.max_stake = 1000
    row.status = kwargs.get("status", "ACTIVE")
    row.winning_option_id = None
    row.resolved_at = None
    row.created_by = None
    row.created_at = datetime(2026, 10, 1, tzinfo=UTC)
    row.updated_at = datetime(2026, 10, 1, tzinfo=UTC)
    row.bet_count = kwargs.get("bet_count", 0)
    row.total_staked = kwargs.get("total_staked", 0)
    return row


def _make_option_row(option_id: str, event_id: str = "EVT-1", odds: str = "2.00"):
    row = MagicMock()
    row.id = option_id
    row.event_id = event_id
    row.label = f"Label {option_id}"
    row.odds = Decimal(odds)
    row.position = 0
    row.is_winning = False
    return row


def _result(fetchone=None, fetchall=None):
    result = MagicMock()
    result.fetchone.return_value = fetchone
    result.fetchall.return_value = fetchall or []
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestGetEvent:
    async def test_loads_options(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=[
                _result(fetchone=_make_event_row()),
                _result(fetchall=[_make_option_row("OPT-1"), _make_option_row("OPT-2", odds="3.10")]),
            ]
        )

        event = await EventRepository().get_event(db, "EVT-1")

        assert event is not None
        assert [o.id for o in event.options] == ["OPT-1", "OPT-2"]
        assert event.options[1].odds == Decimal("3.10")

    async def test_missing_event_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(fetchone=None))

        assert await EventRepository().get_event(db, "EVT-404") is None
        assert db.execute.await_count == 1

    @pytest.mark.parametrize(("lock", "clause"), [("SHARE", "FOR SHARE"), ("UPDATE", "FOR UPDATE")])
    async def test_lock_clause(self, db, lock: str, clause: str) -> None:
        db.execute = AsyncMock(return_value=_result(fetchone=None))

        await EventRepository().get_event(db, "EVT-1", lock=lock)

        sql = str(db.execute.await_args.args[0])
        assert clause in sql

    async def test_no_lock_by_default(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(fetchone=None))

        await EventRepository().get_event(db, "EVT-1")

        assert "FOR " not in str(db.execute.await_args.args[0])


class TestListEvents:
    async def test_maps_stats_and_groups_options(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=[
                _result(fetchall=[
                    _make_event_row(id="EVT-1", bet_count=3, total_staked=450),
                    _make_event_row(id="EVT-2"),
                ]),
                _result(fetchall=[
                    _make_option_row("OPT-1", "EVT-1"),
                    _make_option_row("OPT-2", "EVT-2"),
                    _make_option_row("OPT-3", "EVT-1"),
                ]),
            ]
        )

        summaries = await EventRepository().list_events(db, "ACTIVE", None, 20)

        assert (summaries[0].bet_count, summaries[0].total_staked) == (3, 450)
        assert [o.id for o in summaries[0].event.options] == ["OPT-1", "OPT-3"]
        assert [o.id for o in summaries[1].event.options] == ["OPT-2"]
        params = db.execute.await_args_list[0].args[1]
        assert params == {"status": "ACTIVE", "category": None, "limit": 20}

    async def test_empty_listing_skips_option_query(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(fetchall=[]))

        assert await EventRepository().list_events(db, None, None, 20) == []
        assert db.execute.await_count == 1


class TestMarkResolved:
    async def test_updates_event_and_options(self, db) -> None:
        db.execute = AsyncMock()
        resolved_at = datetime(2026, 10, 19, tzinfo=UTC)

        await EventRepository().mark_resolved(db, "EVT-1", "OPT-2", resolved_at)

        first, second = db.execute.await_args_list
        assert first.args[1] == {"event_id": "EVT-1", "winning_option_id": "OPT-2", "resolved_at": resolved_at}
        assert "is_winning" in str(second.args[0])
