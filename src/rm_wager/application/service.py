"""WagerService: place_bet and bet history.

place_bet runs in one transaction. Every check happens before the first
write, and the debit plus the bet insert commit together or not at all:

  1. amount is a positive int within [min_stake, max_stake]
  2. event exists (read FOR SHARE), is ACTIVE and has not ended
  3. option belongs to the event
  4. account exists (read FOR UPDATE) and covers the stake
  5. no ACTIVE bet for (user, event); the partial unique index is the last guard
  6. debit BET_PLACED referencing the new bet id, then insert the bet
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.domain.repository import AccountRepositoryProtocol
from src.rm_account.infrastructure.persistence import AccountRepository
from src.rm_catalog.domain.repository import EventRepositoryProtocol
from src.rm_catalog.infrastructure.persistence import EventRepository
from src.rm_common.datetime_utils import utc_now
from src.rm_common.enums import BetStatus, EventStatus, LedgerEntryType, ReferenceType
from src.rm_common.errors import (
    AccountNotFoundError,
    DuplicateBetError,
    EventEndedError,
    EventNotActiveError,
    EventNotFoundError,
    InsufficientFundsError,
    InvalidInputError,
    OptionNotFoundError,
    StorageError,
)
from src.rm_common.id_generator import generate_id
from src.rm_common.points import calculate_payout
from src.rm_wager.application.schemas import (
    BetHistoryItemOut,
    BetListResponse,
    PlaceBetResponse,
    cursor_decode,
    cursor_encode,
)
from src.rm_wager.domain.models import Bet
from src.rm_wager.domain.repository import BetRepositoryProtocol
from src.rm_wager.infrastructure.persistence import BetRepository

logger = logging.getLogger(__name__)

BET_PLACED_REASON = "bet placed"


class WagerService:
    def __init__(
        self,
        bets: BetRepositoryProtocol | None = None,
        events: EventRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._bets: BetRepositoryProtocol = bets or BetRepository()
        self._events: EventRepositoryProtocol = events or EventRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._clock = clock

    async def place_bet(
        self,
        db: AsyncSession,
        user_id: str,
        event_id: str,
        option_id: str,
        amount: int,
    ) -> PlaceBetResponse:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidInputError("amount", "must be a positive integer")

        try:
            bet, balance = await self._place_bet(db, user_id, event_id, option_id, amount)
            await db.commit()
        except IntegrityError as e:
            # Concurrent placement won the partial unique index
            await db.rollback()
            raise DuplicateBetError(user_id, event_id) from e
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"place_bet failed for user {user_id}") from e
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Bet placed: %s user=%s event=%s option=%s amount=%d odds=%s",
            bet.id, user_id, event_id, option_id, amount, bet.odds,
        )
        return PlaceBetResponse.build(bet, balance)

    async def _place_bet(
        self,
        db: AsyncSession,
        user_id: str,
        event_id: str,
        option_id: str,
        amount: int,
    ) -> tuple[Bet, int]:
        event = await self._events.get_event(db, event_id, lock="SHARE")
        if event is None:
            raise EventNotFoundError(event_id)
        if not event.min_stake <= amount <= event.max_stake:
            raise InvalidInputError(
                "amount",
                f"must be between {event.min_stake} and {event.max_stake}",
            )
        if event.status != EventStatus.ACTIVE:
            raise EventNotActiveError(event_id, event.status)
        now = self._clock()
        if event.has_ended(now):
            raise EventEndedError(event_id)

        option = event.option(option_id)
        if option is None:
            raise OptionNotFoundError(event_id, option_id)

        account = await self._accounts.get_account_for_update(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        if account.balance < amount:
            raise InsufficientFundsError(amount, account.balance)

        if await self._bets.get_active_bet(db, user_id, event_id) is not None:
            raise DuplicateBetError(user_id, event_id)

        bet_id = generate_id("BET-")
        updated, _ = await self._accounts.debit(
            db,
            user_id,
            amount,
            LedgerEntryType.BET_PLACED.value,
            BET_PLACED_REASON,
            ReferenceType.BET.value,
            bet_id,
        )
        bet = await self._bets.insert_bet(
            db,
            Bet(
                id=bet_id,
                user_id=user_id,
                event_id=event_id,
                option_id=option_id,
                amount=amount,
                odds=option.odds,
                potential_payout=calculate_payout(amount, option.odds),
                status=BetStatus.ACTIVE.value,
                placed_at=now,
            ),
        )
        return bet, updated.balance

    async def list_user_bets(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> BetListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        items = await self._bets.list_user_bets(
            db, user_id, status, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(items) > limit
        page = items[:limit]
        next_cursor = cursor_encode(page[-1].bet) if has_more and page else None
        return BetListResponse(
            items=[BetHistoryItemOut.from_history(i) for i in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
