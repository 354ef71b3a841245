"""Domain models for rm_wager: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.rm_common.enums import BetStatus


@dataclass
class Bet:
    id: str
    user_id: str
    event_id: str
    option_id: str
    amount: int
    odds: Decimal              # snapshot of the option's odds at placement
    potential_payout: int      # floor(amount * odds)
    status: str
    actual_winnings: int = 0
    placed_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == BetStatus.ACTIVE


@dataclass
class BetHistoryItem:
    """A bet joined with the event and option it was placed on."""

    bet: Bet
    event_title: str
    event_status: str
    option_label: str
