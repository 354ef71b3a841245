"""Pydantic schemas and cursor utilities for rm_account API."""

import base64
import json

from pydantic import BaseModel, Field

from src.rm_account.domain.models import LedgerEntry, Reconciliation
from src.rm_common.points import format_points

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PointsAdjustmentRequest(BaseModel):
    """Admin grant (positive) or deduction (negative) of points."""

    amount: int = Field(..., description="Signed points delta, must not be 0")
    reason: str = Field(..., min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    balance: int
    balance_display: str
    starting_balance: int

    @classmethod
    def from_points(cls, user_id: str, balance: int, starting_balance: int) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            balance=balance,
            balance_display=format_points(balance),
            starting_balance=starting_balance,
        )


class PointsChangeResponse(BaseModel):
    user_id: str
    delta: int
    balance: int
    balance_display: str
    ledger_entry_id: int

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "PointsChangeResponse":
        return cls(
            user_id=entry.user_id,
            delta=entry.amount,
            balance=entry.balance_after,
            balance_display=format_points(entry.balance_after),
            ledger_entry_id=entry.id,
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    balance_after: int
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount=e.amount,
            amount_display=format_points(e.amount),
            balance_after=e.balance_after,
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class ReconciliationResponse(BaseModel):
    user_id: str
    starting_balance: int
    ledger_sum: int
    expected_balance: int
    balance: int
    consistent: bool

    @classmethod
    def from_domain(cls, r: Reconciliation) -> "ReconciliationResponse":
        return cls(
            user_id=r.user_id,
            starting_balance=r.starting_balance,
            ledger_sum=r.ledger_sum,
            expected_balance=r.expected_balance,
            balance=r.balance,
            consistent=r.is_consistent,
        )
