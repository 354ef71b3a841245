"""Request/response bodies for /auth. Routers wrap every response in ApiResponse."""

import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.rm_account.application.schemas import LedgerEntryItem

_PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one digit"),
)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    # bcrypt ignores input past 72 bytes
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        for pattern, message in _PASSWORD_RULES:
            if not pattern.search(v):
                raise ValueError(message)
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserInfo(BaseModel):
    user_id: str
    username: str
    email: str
    is_admin: bool
    last_login_at: datetime | None = None


class RegisterResponse(BaseModel):
    user_id: str
    username: str
    email: str
    balance: int
    created_at: datetime | None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class ProfileResponse(BaseModel):
    """Current user, balance and most recent ledger activity."""

    user: UserInfo
    balance: int
    balance_display: str
    recent_activity: list[LedgerEntryItem]
