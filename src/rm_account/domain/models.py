"""Domain models for rm_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    user_id: str
    balance: int              # points, never negative
    starting_balance: int     # points granted at registration
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    user_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # signed delta, positive=credit negative=debit
    balance_after: int               # balance snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass
class Reconciliation:
    """starting_balance + ledger_sum must equal balance."""

    user_id: str
    starting_balance: int
    ledger_sum: int
    balance: int

    @property
    def expected_balance(self) -> int:
        return self.starting_balance + self.ledger_sum

    @property
    def is_consistent(self) -> bool:
        return self.expected_balance == self.balance
