"""FastAPI dependencies for the identity boundary.

The wagering core trusts whatever these return: an authenticated, active
user, and for admin routes a user whose is_admin flag is set.

    @router.post("/bets")
    async def place(user: UserModel = Depends(get_current_user)): ...

    @router.post("/admin/events")
    async def create(admin: UserModel = Depends(require_admin)): ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.database import get_db_session
from src.rm_common.errors import AccountDisabledError, AdminRequiredError, InvalidCredentialsError
from src.rm_gateway.auth.jwt_handler import decode_token
from src.rm_gateway.user.db_models import UserModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the active UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired, and
    AccountDisabledError (403) if the user has been deactivated.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Reject callers without the is_admin flag (AdminRequiredError, 403)."""
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
