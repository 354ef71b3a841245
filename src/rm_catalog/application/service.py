"""EventCatalogService: event lifecycle and read models.

Writes (create, toggle, delete, resolve) each run as one unit: commit on
success, rollback on any failure. Reads never open an explicit transaction.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rm_account.domain.repository import AccountRepositoryProtocol
from src.rm_catalog.application.schemas import CategoryOut, EventListResponse, EventOut
from src.rm_catalog.domain.models import Event, EventOption, NewEvent
from src.rm_catalog.domain.repository import EventRepositoryProtocol
from src.rm_catalog.infrastructure.categories import CategoryStore
from src.rm_catalog.infrastructure.persistence import EventRepository
from src.rm_common.datetime_utils import as_utc, utc_now
from src.rm_common.enums import EventStatus
from src.rm_common.errors import (
    EventNotFoundError,
    HasBetsError,
    InvalidInputError,
    InvalidTransitionError,
    StorageError,
)
from src.rm_common.id_generator import generate_id
from src.rm_common.points import MAX_ODDS, MIN_ODDS, parse_odds
from src.rm_settlement.domain.settlement import ResolutionResult, resolve_event
from src.rm_wager.domain.repository import BetRepositoryProtocol

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 50
ALL_STATUSES = "ALL"

# Column widths in alembic/versions/004_create_events.py
MAX_TITLE_LENGTH = 255
MAX_LABEL_LENGTH = 255
MAX_CATEGORY_LENGTH = 50


def build_event(new_event: NewEvent, created_by: str | None = None) -> Event:
    """Validate admin input and build an ACTIVE Event with fresh ids.

    Raises InvalidInputError (kind ValidationError) naming the first bad field.
    """
    title = (new_event.title or "").strip()
    description = (new_event.description or "").strip()
    if not title:
        raise InvalidInputError("title", "must not be empty")
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidInputError("title", f"must be at most {MAX_TITLE_LENGTH} characters")
    if not description:
        raise InvalidInputError("description", "must not be empty")
    if new_event.category and len(new_event.category) > MAX_CATEGORY_LENGTH:
        raise InvalidInputError("category", f"must be at most {MAX_CATEGORY_LENGTH} characters")
    if new_event.start_time is None:
        raise InvalidInputError("start_time", "must not be empty")
    if len(new_event.options) < 2:
        raise InvalidInputError("options", "at least 2 options are required")

    start_time = as_utc(new_event.start_time)
    if new_event.end_time is None:
        end_time = start_time + timedelta(days=settings.DEFAULT_EVENT_DURATION_DAYS)
    else:
        end_time = as_utc(new_event.end_time)
    if end_time <= start_time:
        raise InvalidInputError("end_time", "must be after start_time")

    min_stake = settings.DEFAULT_MIN_STAKE if new_event.min_stake is None else new_event.min_stake
    max_stake = settings.DEFAULT_MAX_STAKE if new_event.max_stake is None else new_event.max_stake
    if min_stake < 1:
        raise InvalidInputError("min_stake", "must be at least 1")
    if max_stake < min_stake:
        raise InvalidInputError("max_stake", f"must be at least min_stake ({min_stake})")

    event_id = generate_id("EVT-")
    options: list[EventOption] = []
    for position, option in enumerate(new_event.options):
        label = (option.label or "").strip()
        if not label:
            raise InvalidInputError(f"options[{position}].label", "must not be empty")
        if len(label) > MAX_LABEL_LENGTH:
            raise InvalidInputError(
                f"options[{position}].label", f"must be at most {MAX_LABEL_LENGTH} characters"
            )
        try:
            odds = parse_odds(option.odds)
        except ValueError as e:
            raise InvalidInputError(f"options[{position}].odds", str(e)) from e
        if odds < MIN_ODDS:
            raise InvalidInputError(f"options[{position}].odds", f"must be at least {MIN_ODDS}")
        if odds > MAX_ODDS:
            raise InvalidInputError(f"options[{position}].odds", f"must be at most {MAX_ODDS}")
        options.append(
            EventOption(
                id=generate_id("OPT-"),
                event_id=event_id,
                label=label,
                odds=odds,
                position=position,
            )
        )

    return Event(
        id=event_id,
        title=title,
        description=description,
        category=new_event.category or None,
        start_time=start_time,
        end_time=end_time,
        min_stake=min_stake,
        max_stake=max_stake,
        status=EventStatus.ACTIVE.value,
        created_by=created_by,
        options=options,
    )


class EventCatalogService:
    def __init__(
        self,
        repo: EventRepositoryProtocol | None = None,
        bets: BetRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._repo: EventRepositoryProtocol = repo or EventRepository()
        # Passed through to the resolution engine, which defaults missing ones
        self._bets = bets
        self._accounts = accounts

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_event(
        self, db: AsyncSession, new_event: NewEvent, created_by: str | None = None
    ) -> EventOut:
        event = build_event(new_event, created_by)
        try:
            await self._repo.insert_event(db, event)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"create_event failed for {event.id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Event created: %s '%s' with %d options", event.id, event.title, len(event.options)
        )
        return EventOut.from_domain(event, utc_now())

    async def toggle_status(self, db: AsyncSession, event_id: str) -> EventOut:
        try:
            event = await self._repo.get_event(db, event_id, lock="UPDATE")
            if event is None:
                raise EventNotFoundError(event_id)
            if event.status == EventStatus.RESOLVED:
                raise InvalidTransitionError(
                    "resolved events cannot change status", event_id=event_id, status=event.status
                )
            new_status = (
                EventStatus.INACTIVE if event.status == EventStatus.ACTIVE else EventStatus.ACTIVE
            )
            await self._repo.update_status(db, event_id, new_status.value)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"toggle_status failed for {event_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Event %s status %s -> %s", event_id, event.status, new_status.value)
        event.status = new_status.value
        return EventOut.from_domain(event, utc_now())

    async def delete_event(self, db: AsyncSession, event_id: str) -> None:
        try:
            event = await self._repo.get_event(db, event_id, lock="UPDATE")
            if event is None:
                raise EventNotFoundError(event_id)
            bet_count = await self._repo.count_bets(db, event_id)
            if bet_count > 0:
                raise HasBetsError(event_id, bet_count)
            await self._repo.delete_event(db, event_id)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"delete_event failed for {event_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Event deleted: %s", event_id)

    async def resolve(
        self, db: AsyncSession, event_id: str, winning_option_id: str
    ) -> ResolutionResult:
        """Resolve the event and settle all of its active bets in one transaction."""
        try:
            result = await resolve_event(
                event_id, winning_option_id, db,
                events=self._repo, bets=self._bets, accounts=self._accounts,
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"resolve failed for {event_id}") from e
        except Exception:
            await db.rollback()
            raise
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_events(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        limit: int,
    ) -> EventListResponse:
        # Default filter is ACTIVE; "ALL" disables the status filter
        if status is None:
            status_filter: str | None = EventStatus.ACTIVE.value
        elif status.upper() == ALL_STATUSES:
            status_filter = None
        else:
            status_filter = status.upper()
            if status_filter not in {s.value for s in EventStatus}:
                raise InvalidInputError("status", f"unknown status {status!r}")
        summaries = await self._repo.list_events(
            db, status_filter, category, min(limit, MAX_LIST_LIMIT)
        )
        now = utc_now()
        items = [EventOut.from_summary(s, now) for s in summaries]
        return EventListResponse(items=items, count=len(items))

    async def get_event(self, db: AsyncSession, event_id: str) -> EventOut:
        event = await self._repo.get_event(db, event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        bet_count, total_staked = await self._repo.get_event_stats(db, event_id)
        return EventOut.from_domain(event, utc_now(), bet_count, total_staked)

    async def list_categories(self, store: CategoryStore) -> list[CategoryOut]:
        categories = await store.list_categories()
        return [CategoryOut(key=key, name=name) for key, name in categories.items()]
