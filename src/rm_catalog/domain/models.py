"""Domain models for rm_catalog: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.rm_common.enums import EventStatus


@dataclass
class EventOption:
    id: str
    event_id: str
    label: str
    odds: Decimal          # >= 1.00, two decimals
    position: int          # display order within the event
    is_winning: bool = False


@dataclass
class Event:
    id: str
    title: str
    description: str
    category: str | None
    start_time: datetime
    end_time: datetime
    min_stake: int
    max_stake: int
    status: str
    winning_option_id: str | None = None
    resolved_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    options: list[EventOption] = field(default_factory=list)

    def option(self, option_id: str) -> EventOption | None:
        return next((o for o in self.options if o.id == option_id), None)

    @property
    def is_resolved(self) -> bool:
        return self.status == EventStatus.RESOLVED

    def has_ended(self, now: datetime) -> bool:
        return now >= self.end_time

    def is_upcoming(self, now: datetime) -> bool:
        return self.start_time > now

    def is_live(self, now: datetime) -> bool:
        return (
            self.status == EventStatus.ACTIVE
            and self.start_time <= now < self.end_time
        )


@dataclass
class EventSummary:
    """Event plus its wagering stats, as shown in listings."""

    event: Event
    bet_count: int = 0
    total_staked: int = 0


@dataclass
class NewOption:
    label: str
    odds: Decimal


@dataclass
class NewEvent:
    """Admin input for create_event, before validation."""

    title: str
    description: str
    category: str | None
    start_time: datetime | None
    options: list[NewOption]
    end_time: datetime | None = None
    min_stake: int | None = None
    max_stake: int | None = None
