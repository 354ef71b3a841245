"""Admin application service.

Event lifecycle calls delegate to the Event Catalog; points adjustments go
through the Account Store so every change lands in the ledger. User flags
(is_active, is_admin) live on the users table and are updated here directly.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.application.schemas import PointsChangeResponse
from src.rm_account.application.service import AccountApplicationService
from src.rm_catalog.application.schemas import EventOut
from src.rm_catalog.application.service import EventCatalogService
from src.rm_catalog.domain.models import NewEvent
from src.rm_common.enums import LedgerEntryType, ReferenceType
from src.rm_common.errors import (
    InvalidInputError,
    InvalidTransitionError,
    StorageError,
    UserNotFoundError,
)
from src.rm_settlement.domain.invariants import verify_ledger_reconciliation
from src.rm_settlement.domain.settlement import ResolutionResult

logger = logging.getLogger(__name__)

_GET_USER_SQL = text(
    "SELECT id, username, is_active, is_admin FROM users WHERE id = :user_id FOR UPDATE"
)
_SET_ACTIVE_SQL = text(
    "UPDATE users SET is_active = :is_active, updated_at = NOW() WHERE id = :user_id"
)
_SET_ADMIN_SQL = text(
    "UPDATE users SET is_admin = :is_admin, updated_at = NOW() WHERE id = :user_id"
)
_STATS_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM users WHERE is_active) AS active_users,
        (SELECT COUNT(*) FROM events) AS total_events,
        (SELECT COUNT(*) FROM events WHERE status = 'ACTIVE') AS active_events,
        (SELECT COUNT(*) FROM events WHERE status = 'RESOLVED') AS resolved_events,
        (SELECT COUNT(*) FROM bets) AS total_bets,
        (SELECT COALESCE(SUM(amount), 0) FROM bets) AS total_volume,
        (SELECT COALESCE(SUM(actual_winnings), 0) FROM bets WHERE status = 'WON') AS total_paid_out
""")


def _parse_user_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise UserNotFoundError(user_id) from None


class AdminService:
    def __init__(
        self,
        catalog: EventCatalogService | None = None,
        accounts: AccountApplicationService | None = None,
    ) -> None:
        self._catalog = catalog or EventCatalogService()
        self._accounts = accounts or AccountApplicationService()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def create_event(
        self, db: AsyncSession, new_event: NewEvent, admin_id: str
    ) -> EventOut:
        return await self._catalog.create_event(db, new_event, created_by=admin_id)

    async def toggle_event(self, db: AsyncSession, event_id: str) -> EventOut:
        return await self._catalog.toggle_status(db, event_id)

    async def delete_event(self, db: AsyncSession, event_id: str) -> None:
        await self._catalog.delete_event(db, event_id)

    async def resolve_event(
        self, db: AsyncSession, event_id: str, winning_option_id: str
    ) -> ResolutionResult:
        return await self._catalog.resolve(db, event_id, winning_option_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def adjust_points(
        self, db: AsyncSession, user_id: str, amount: int, reason: str, admin_id: str
    ) -> PointsChangeResponse:
        """Positive amount grants, negative deducts. A deduction never overdraws."""
        if amount == 0:
            raise InvalidInputError("amount", "must not be 0")
        if amount > 0:
            result = await self._accounts.credit(
                db, user_id, amount, LedgerEntryType.ADMIN_GRANT.value, reason,
                ReferenceType.ADMIN.value, admin_id,
            )
        else:
            result = await self._accounts.debit(
                db, user_id, -amount, LedgerEntryType.ADMIN_DEDUCT.value, reason,
                ReferenceType.ADMIN.value, admin_id,
            )
        logger.info("Admin %s adjusted points of %s by %d: %s", admin_id, user_id, amount, reason)
        return result

    async def toggle_user_active(
        self, db: AsyncSession, user_id: str, admin_id: str
    ) -> dict[str, Any]:
        if user_id == admin_id:
            raise InvalidTransitionError("admins cannot deactivate themselves", user_id=user_id)
        uid = _parse_user_id(user_id)
        try:
            row = (await db.execute(_GET_USER_SQL, {"user_id": uid})).fetchone()
            if row is None:
                raise UserNotFoundError(user_id)
            is_active = not row.is_active
            await db.execute(_SET_ACTIVE_SQL, {"user_id": uid, "is_active": is_active})
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"toggle_user_active failed for {user_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s set is_active=%s for %s", admin_id, is_active, user_id)
        return {"user_id": user_id, "username": row.username, "is_active": is_active}

    async def set_admin(
        self, db: AsyncSession, user_id: str, is_admin: bool, admin_id: str
    ) -> dict[str, Any]:
        if not is_admin and user_id == admin_id:
            raise InvalidTransitionError("admins cannot revoke their own admin rights", user_id=user_id)
        uid = _parse_user_id(user_id)
        try:
            row = (await db.execute(_GET_USER_SQL, {"user_id": uid})).fetchone()
            if row is None:
                raise UserNotFoundError(user_id)
            await db.execute(_SET_ADMIN_SQL, {"user_id": uid, "is_admin": is_admin})
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError(f"set_admin failed for {user_id}") from e
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s set is_admin=%s for %s", admin_id, is_admin, user_id)
        return {"user_id": user_id, "username": row.username, "is_admin": is_admin}

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def get_stats(self, db: AsyncSession) -> dict[str, int]:
        row = (await db.execute(_STATS_SQL)).fetchone()
        if row is None:
            return {}
        return {key: int(value) for key, value in row._mapping.items()}

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, object]:
        """Ledger reconciliation across every account."""
        violations = await verify_ledger_reconciliation(db)
        return {"ok": len(violations) == 0, "violations": violations}
