"""AccountApplicationService: thin composition layer over the Account Store.

credit and debit run as one unit each: commit on success, rollback on any
failure. Read operations (balance, ledger, reconciliation) run without an
explicit transaction.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    PointsChangeResponse,
    ReconciliationResponse,
    cursor_decode,
    cursor_encode,
)
from src.rm_account.domain.repository import AccountRepositoryProtocol
from src.rm_account.infrastructure.persistence import AccountRepository
from src.rm_common.errors import AccountNotFoundError, StorageError

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        account = await self._repo.get_account(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return BalanceResponse.from_points(
            user_id=user_id,
            balance=account.balance,
            starting_balance=account.starting_balance,
        )

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        reason: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> PointsChangeResponse:
        try:
            _, entry = await self._repo.credit(
                db, user_id, amount, entry_type, reason, reference_type, reference_id
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"credit failed for user {user_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Credited %d points to %s (%s)", amount, user_id, entry_type)
        return PointsChangeResponse.from_entry(entry)

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        reason: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> PointsChangeResponse:
        try:
            _, entry = await self._repo.debit(
                db, user_id, amount, entry_type, reason, reference_type, reference_id
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"debit failed for user {user_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Debited %d points from %s (%s)", amount, user_id, entry_type)
        return PointsChangeResponse.from_entry(entry)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [LedgerEntryItem.from_domain(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_reconciliation(
        self, db: AsyncSession, user_id: str
    ) -> ReconciliationResponse:
        reconciliation = await self._repo.get_reconciliation(db, user_id)
        if reconciliation is None:
            raise AccountNotFoundError(user_id)
        if not reconciliation.is_consistent:
            logger.error(
                "Ledger mismatch for %s: expected %d, balance %d",
                user_id,
                reconciliation.expected_balance,
                reconciliation.balance,
            )
        return ReconciliationResponse.from_domain(reconciliation)
