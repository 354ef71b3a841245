"""Event resolution: pay out winners, close losers, lock the event for good.

Runs inside the caller's transaction; the caller commits once after
resolve_event returns or rolls back on any exception, so all bets of one
event settle together or none do.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.domain.repository import AccountRepositoryProtocol
from src.rm_account.infrastructure.persistence import AccountRepository
from src.rm_catalog.domain.repository import EventRepositoryProtocol
from src.rm_catalog.infrastructure.persistence import EventRepository
from src.rm_common.datetime_utils import utc_now
from src.rm_common.enums import LedgerEntryType, ReferenceType
from src.rm_common.errors import AlreadyResolvedError, EventNotFoundError, OptionNotFoundError
from src.rm_common.points import calculate_payout
from src.rm_wager.domain.repository import BetRepositoryProtocol
from src.rm_wager.infrastructure.persistence import BetRepository

logger = logging.getLogger(__name__)

BET_WON_REASON = "bet won"


@dataclass
class ResolutionResult:
    event_id: str
    winning_option_id: str
    processed: int
    won: int
    lost: int
    total_paid_out: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


async def resolve_event(
    event_id: str,
    winning_option_id: str,
    db: AsyncSession,
    events: EventRepositoryProtocol | None = None,
    bets: BetRepositoryProtocol | None = None,
    accounts: AccountRepositoryProtocol | None = None,
    now: datetime | None = None,
) -> ResolutionResult:
    """Resolve an event and settle every ACTIVE bet on it.

    The event row is locked FOR UPDATE first, so a second resolution of the
    same event waits and then fails with AlreadyResolvedError, and bet
    placements holding FOR SHARE on the event finish before payouts start.
    """
    events = events or EventRepository()
    bets = bets or BetRepository()
    accounts = accounts or AccountRepository()
    resolved_at = now or utc_now()

    event = await events.get_event(db, event_id, lock="UPDATE")
    if event is None:
        raise EventNotFoundError(event_id)
    if event.is_resolved:
        raise AlreadyResolvedError(event_id)
    if event.option(winning_option_id) is None:
        raise OptionNotFoundError(event_id, winning_option_id)

    await events.mark_resolved(db, event_id, winning_option_id, resolved_at)

    won = lost = total_paid_out = 0
    # Accounts are locked in (user_id, id) order across all resolutions
    active_bets = sorted(
        await bets.list_active_bets_for_update(db, event_id), key=lambda b: (b.user_id, b.id)
    )
    for bet in active_bets:
        if bet.option_id == winning_option_id:
            winnings = calculate_payout(bet.amount, bet.odds)
            if winnings > 0:
                await accounts.credit(
                    db,
                    bet.user_id,
                    winnings,
                    LedgerEntryType.BET_WON.value,
                    BET_WON_REASON,
                    ReferenceType.BET.value,
                    bet.id,
                )
            await bets.mark_won(db, bet.id, winnings, resolved_at)
            won += 1
            total_paid_out += winnings
        else:
            await bets.mark_lost(db, bet.id, resolved_at)
            lost += 1

    logger.info(
        "Event %s resolved: winner=%s processed=%d won=%d lost=%d paid_out=%d",
        event_id, winning_option_id, len(active_bets), won, lost, total_paid_out,
    )
    return ResolutionResult(
        event_id=event_id,
        winning_option_id=winning_option_id,
        processed=len(active_bets),
        won=won,
        lost=lost,
        total_paid_out=total_paid_out,
    )
