"""User service: register, login, refresh, profile, bootstrap admin.

Registration creates the user and its points account in one transaction;
the router wraps it in `async with db.begin()`.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rm_account.domain.models import Account, LedgerEntry
from src.rm_account.domain.repository import AccountRepositoryProtocol
from src.rm_account.infrastructure.persistence import AccountRepository
from src.rm_common.datetime_utils import utc_now
from src.rm_common.errors import (
    AccountDisabledError,
    AccountNotFoundError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.rm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.rm_gateway.auth.password import hash_password, verify_password
from src.rm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(self, account_repo: AccountRepositoryProtocol | None = None) -> None:
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
        is_admin: bool = False,
    ) -> tuple[UserModel, Account]:
        """Register a new user and create their account with the starting balance.

        Admins start with ADMIN_STARTING_BALANCE, everyone else with
        STARTING_BALANCE. The caller must wrap this in `async with db.begin()`.
        """
        # DB UNIQUE constraints are the final guard
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
            is_admin=is_admin,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing

        starting_balance = (
            settings.ADMIN_STARTING_BALANCE if is_admin else settings.STARTING_BALANCE
        )
        account = await self._accounts.create_account(db, str(user.id), starting_balance)
        logger.info("Registered user %s (admin=%s)", username, is_admin)
        return user, account

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown user and wrong password both raise InvalidCredentialsError.
        A successful login stamps last_login_at.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user.last_login_at = utc_now()
        await db.commit()

        return (
            user,
            create_access_token(str(user.id), is_admin=user.is_admin),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        user_id = str(payload["sub"])
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(user_id, is_admin=user.is_admin)

    async def get_profile(
        self, db: AsyncSession, user: UserModel
    ) -> tuple[Account, list[LedgerEntry]]:
        account = await self._accounts.get_account(db, user.account_id)
        if account is None:
            raise AccountNotFoundError(user.account_id)
        recent = await self._accounts.list_ledger_entries(
            db, user.account_id, None, RECENT_ACTIVITY_LIMIT, None
        )
        return account, recent

    async def ensure_bootstrap_admin(self, db: AsyncSession) -> UserModel | None:
        """Create the configured bootstrap admin once. Returns it if created."""
        username = settings.BOOTSTRAP_ADMIN_USERNAME
        email = settings.BOOTSTRAP_ADMIN_EMAIL
        password = settings.BOOTSTRAP_ADMIN_PASSWORD
        if not (username and email and password):
            return None

        async with db.begin():
            result = await db.execute(
                select(UserModel).where(UserModel.username == username)
            )
            if result.scalar_one_or_none() is not None:
                return None
            user, _ = await self.register(username, email, password, db, is_admin=True)
        logger.info("Bootstrap admin %s created", username)
        return user
