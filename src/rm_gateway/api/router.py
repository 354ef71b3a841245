"""/auth endpoints.

    POST /auth/register  create user + points account (201)
    POST /auth/login     exchange credentials for an access/refresh pair
    POST /auth/refresh   exchange a refresh token for a new access token
    GET  /auth/me        current user, balance and recent ledger activity
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rm_account.application.schemas import LedgerEntryItem
from src.rm_common.database import get_db_session
from src.rm_common.points import format_points
from src.rm_common.response import ApiResponse, success_response
from src.rm_gateway.auth.dependencies import get_current_user
from src.rm_gateway.user.db_models import UserModel
from src.rm_gateway.user.schemas import (
    AccessToken,
    LoginRequest,
    ProfileResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPair,
    UserInfo,
)
from src.rm_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()

_ACCESS_TTL_SECONDS = settings.JWT_EXPIRE_MINUTES * 60


def _respond(request: Request, data: Any, message: str) -> ApiResponse:
    resp = success_response(data, message=message)
    resp.request_id = getattr(request.state, "request_id", "req_unknown")
    return resp


def _user_info(user: UserModel) -> UserInfo:
    return UserInfo(
        user_id=user.account_id,
        username=user.username,
        email=user.email,
        is_admin=user.is_admin,
        last_login_at=user.last_login_at,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user, account = await _service.register(body.username, body.email, body.password, db)

    data = RegisterResponse(
        user_id=user.account_id,
        username=user.username,
        email=user.email,
        balance=account.balance,
        created_at=user.created_at,
    )
    return _respond(request, data.model_dump(mode="json"), "User registered successfully")


@router.post("/login", response_model=ApiResponse)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)
    data = TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=_ACCESS_TTL_SECONDS,
        user=_user_info(user),
    )
    return _respond(request, data.model_dump(mode="json"), "Login successful")


@router.post("/refresh", response_model=ApiResponse)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    access_token = await _service.refresh(body.refresh_token, db)
    data = AccessToken(access_token=access_token, expires_in=_ACCESS_TTL_SECONDS)
    return _respond(request, data.model_dump(mode="json"), "Token refreshed")


@router.get("/me", response_model=ApiResponse)
async def me(
    request: Request,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    account, recent = await _service.get_profile(db, user)
    data = ProfileResponse(
        user=_user_info(user),
        balance=account.balance,
        balance_display=format_points(account.balance),
        recent_activity=[LedgerEntryItem.from_domain(e) for e in recent],
    )
    return _respond(request, data.model_dump(mode="json"), "OK")
