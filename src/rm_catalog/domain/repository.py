"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_catalog.domain.models import Event, EventSummary


class EventRepositoryProtocol(Protocol):
    async def insert_event(self, db: AsyncSession, event: Event) -> None: ...

    async def get_event(
        self, db: AsyncSession, event_id: str, lock: str | None = None
    ) -> Event | None: ...

    async def list_events(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        limit: int,
    ) -> list[EventSummary]: ...

    async def get_event_stats(self, db: AsyncSession, event_id: str) -> tuple[int, int]: ...

    async def update_status(self, db: AsyncSession, event_id: str, status: str) -> None: ...

    async def count_bets(self, db: AsyncSession, event_id: str) -> int: ...

    async def delete_event(self, db: AsyncSession, event_id: str) -> None: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        event_id: str,
        winning_option_id: str,
        resolved_at: datetime,
    ) -> None: ...
