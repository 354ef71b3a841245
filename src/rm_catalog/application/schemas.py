"""Pydantic schemas for rm_catalog requests and responses.

Odds leave the service as two-decimal strings ("2.50") so no client ever
sees a binary float.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.rm_catalog.domain.models import Event, EventOption, EventSummary, NewEvent, NewOption

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class OptionIn(BaseModel):
    label: str
    odds: Decimal


class CreateEventRequest(BaseModel):
    title: str
    description: str
    category: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    min_stake: int | None = None
    max_stake: int | None = None
    options: list[OptionIn] = Field(default_factory=list)

    def to_domain(self) -> NewEvent:
        return NewEvent(
            title=self.title,
            description=self.description,
            category=self.category,
            start_time=self.start_time,
            end_time=self.end_time,
            min_stake=self.min_stake,
            max_stake=self.max_stake,
            options=[NewOption(label=o.label, odds=o.odds) for o in self.options],
        )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class EventOptionOut(BaseModel):
    id: str
    label: str
    odds: str
    is_winning: bool

    @classmethod
    def from_domain(cls, option: EventOption) -> "EventOptionOut":
        return cls(
            id=option.id,
            label=option.label,
            odds=str(option.odds),
            is_winning=option.is_winning,
        )


class EventOut(BaseModel):
    id: str
    title: str
    description: str
    category: str | None
    start_time: datetime
    end_time: datetime
    min_stake: int
    max_stake: int
    status: str
    winning_option_id: str | None
    resolved_at: datetime | None
    options: list[EventOptionOut]
    bet_count: int
    total_staked: int
    is_upcoming: bool
    is_live: bool
    is_ended: bool

    @classmethod
    def from_domain(cls, event: Event, now: datetime, bet_count: int = 0, total_staked: int = 0) -> "EventOut":
        options = sorted(event.options, key=lambda o: (o.odds, o.position))
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            category=event.category,
            start_time=event.start_time,
            end_time=event.end_time,
            min_stake=event.min_stake,
            max_stake=event.max_stake,
            status=event.status,
            winning_option_id=event.winning_option_id,
            resolved_at=event.resolved_at,
            options=[EventOptionOut.from_domain(o) for o in options],
            bet_count=bet_count,
            total_staked=total_staked,
            is_upcoming=event.is_upcoming(now),
            is_live=event.is_live(now),
            is_ended=event.has_ended(now),
        )

    @classmethod
    def from_summary(cls, summary: EventSummary, now: datetime) -> "EventOut":
        return cls.from_domain(summary.event, now, summary.bet_count, summary.total_staked)


class EventListResponse(BaseModel):
    items: list[EventOut]
    count: int


class CategoryOut(BaseModel):
    key: str
    name: str
