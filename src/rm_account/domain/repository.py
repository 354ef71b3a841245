"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.domain.models import Account, LedgerEntry, Reconciliation


class AccountRepositoryProtocol(Protocol):
    async def get_account(self, db: AsyncSession, user_id: str) -> Account | None: ...

    async def get_account_for_update(
        self, db: AsyncSession, user_id: str
    ) -> Account | None: ...

    async def create_account(
        self, db: AsyncSession, user_id: str, starting_balance: int
    ) -> Account: ...

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> tuple[Account, LedgerEntry]: ...

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> tuple[Account, LedgerEntry]: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...

    async def get_reconciliation(
        self, db: AsyncSession, user_id: str
    ) -> Reconciliation | None: ...
