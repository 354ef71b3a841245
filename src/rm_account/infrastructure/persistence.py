"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

credit/debit are the only statements that touch accounts.balance. Each one is
a relative, atomic PostgreSQL UPDATE ... RETURNING followed by a ledger insert.
A debit returning 0 rows means the balance was too low (or the account is missing).

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back; nothing here commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.domain.models import Account, LedgerEntry, Reconciliation
from src.rm_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    StorageError,
)

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = "user_id, balance, starting_balance, version, created_at, updated_at"

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
    FOR UPDATE
""")

_CREATE_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (user_id, balance, starting_balance, version)
    VALUES (:user_id, :starting_balance, :starting_balance, 0)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_CREDIT_SQL = text(f"""
    UPDATE accounts
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DEBIT_SQL = text(f"""
    UPDATE accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries (append-only)
# ---------------------------------------------------------------------------

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = CAST(:entry_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_RECONCILIATION_SQL = text("""
    SELECT a.user_id, a.starting_balance, a.balance,
           COALESCE(SUM(l.amount), 0) AS ledger_sum
    FROM accounts a
    LEFT JOIN ledger_entries l ON l.user_id = a.user_id
    WHERE a.user_id = :user_id
    GROUP BY a.user_id, a.starting_balance, a.balance
""")


def _row_to_account(row: object) -> Account:
    return Account(
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        starting_balance=row.starting_balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


class AccountRepository:
    """Concrete repository: every balance change is atomic at the SQL level."""

    async def get_account(self, db: AsyncSession, user_id: str) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def get_account_for_update(
        self, db: AsyncSession, user_id: str
    ) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_FOR_UPDATE_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def create_account(
        self, db: AsyncSession, user_id: str, starting_balance: int
    ) -> Account:
        result = await db.execute(
            _CREATE_ACCOUNT_SQL,
            {"user_id": user_id, "starting_balance": starting_balance},
        )
        row = result.fetchone()
        if row is None:
            raise StorageError("Account insert returned no rows: this should never happen")
        return _row_to_account(row)

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> tuple[Account, LedgerEntry]:
        _check_amount(amount)
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(user_id)
        account = _row_to_account(row)
        entry = await self._append_ledger(
            db, account, amount, entry_type, description, reference_type, reference_id
        )
        return account, entry

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> tuple[Account, LedgerEntry]:
        _check_amount(amount)
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_account(db, user_id)
            if current is None:
                raise AccountNotFoundError(user_id)
            raise InsufficientFundsError(amount, current.balance)
        account = _row_to_account(row)
        entry = await self._append_ledger(
            db, account, -amount, entry_type, description, reference_type, reference_id
        )
        return account, entry

    async def _append_ledger(
        self,
        db: AsyncSession,
        account: Account,
        delta: int,
        entry_type: str,
        description: str,
        reference_type: str | None,
        reference_id: str | None,
    ) -> LedgerEntry:
        ledger_result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": account.user_id,
                "entry_type": entry_type,
                "amount": delta,
                "balance_after": account.balance,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "description": description,
            },
        )
        ledger_row = ledger_result.fetchone()
        if ledger_row is None:
            raise StorageError("Ledger insert returned no rows: this should never happen")
        return _row_to_ledger(ledger_row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_ledger(row) for row in rows]

    async def get_reconciliation(
        self, db: AsyncSession, user_id: str
    ) -> Reconciliation | None:
        result = await db.execute(_RECONCILIATION_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return Reconciliation(
            user_id=str(row.user_id),
            starting_balance=row.starting_balance,
            ledger_sum=int(row.ledger_sum),
            balance=row.balance,
        )
