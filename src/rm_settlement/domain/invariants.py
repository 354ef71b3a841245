"""Ledger reconciliation check across all accounts."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_MISMATCHED_ACCOUNTS_SQL = text("""
    SELECT a.user_id, a.starting_balance, a.balance,
           COALESCE(SUM(l.amount), 0) AS ledger_sum
    FROM accounts a
    LEFT JOIN ledger_entries l ON l.user_id = a.user_id
    GROUP BY a.user_id, a.starting_balance, a.balance
    HAVING a.starting_balance + COALESCE(SUM(l.amount), 0) <> a.balance
    ORDER BY a.user_id
""")

_NEGATIVE_BALANCE_SQL = text(
    "SELECT user_id, balance FROM accounts WHERE balance < 0 ORDER BY user_id"
)


async def verify_ledger_reconciliation(db: AsyncSession) -> list[str]:
    """starting_balance + SUM(ledger) == balance and balance >= 0 for every account.

    Returns a list of violation strings, empty when the ledger is consistent.
    """
    violations: list[str] = []
    for row in (await db.execute(_MISMATCHED_ACCOUNTS_SQL)).fetchall():
        expected = row.starting_balance + int(row.ledger_sum)
        violations.append(
            f"Ledger mismatch for {row.user_id}: starting({row.starting_balance}) + "
            f"ledger({int(row.ledger_sum)}) = {expected} != balance({row.balance})"
        )
    for row in (await db.execute(_NEGATIVE_BALANCE_SQL)).fetchall():
        violations.append(f"Negative balance for {row.user_id}: {row.balance}")
    for msg in violations:
        logger.error(msg)
    return violations
