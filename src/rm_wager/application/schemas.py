"""Pydantic schemas for rm_wager.

Cursor format for bet history (VARCHAR PK, not sequential):
  {"ts": "<placed_at ISO>", "id": "<bet_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime

from pydantic import BaseModel

from src.rm_common.points import format_points
from src.rm_wager.domain.models import Bet, BetHistoryItem

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_bet: Bet) -> str:
    """Encode composite cursor from last bet in page."""
    payload = {"ts": last_bet.placed_at.isoformat() if last_bet.placed_at else None, "id": last_bet.id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime | None, str | None]:
    """Decode composite cursor -> (placed_at, bet_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(data["ts"]), data["id"]
    except Exception:
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class PlaceBetRequest(BaseModel):
    event_id: str
    option_id: str
    amount: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BetOut(BaseModel):
    id: str
    event_id: str
    option_id: str
    amount: int
    odds: str
    potential_payout: int
    status: str
    actual_winnings: int
    placed_at: datetime | None
    resolved_at: datetime | None

    @classmethod
    def from_domain(cls, bet: Bet) -> "BetOut":
        return cls(
            id=bet.id,
            event_id=bet.event_id,
            option_id=bet.option_id,
            amount=bet.amount,
            odds=str(bet.odds),
            potential_payout=bet.potential_payout,
            status=bet.status,
            actual_winnings=bet.actual_winnings,
            placed_at=bet.placed_at,
            resolved_at=bet.resolved_at,
        )


class PlaceBetResponse(BaseModel):
    bet: BetOut
    balance: int
    balance_display: str
    potential_payout: int

    @classmethod
    def build(cls, bet: Bet, balance: int) -> "PlaceBetResponse":
        return cls(
            bet=BetOut.from_domain(bet),
            balance=balance,
            balance_display=format_points(balance),
            potential_payout=bet.potential_payout,
        )


class BetHistoryItemOut(BetOut):
    event_title: str
    event_status: str
    option_label: str

    @classmethod
    def from_history(cls, item: BetHistoryItem) -> "BetHistoryItemOut":
        return cls(
            **BetOut.from_domain(item.bet).model_dump(),
            event_title=item.event_title,
            event_status=item.event_status,
            option_label=item.option_label,
        )


class BetListResponse(BaseModel):
    items: list[BetHistoryItemOut]
    next_cursor: str | None
    has_more: bool
