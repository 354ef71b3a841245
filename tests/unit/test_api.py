"""HTTP surface tests: routing, auth guards and the error envelope (no DB)."""

import uuid
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.rm_account.domain.models import Account, LedgerEntry
from src.rm_catalog.api import router as catalog_api
from src.rm_common.database import get_db_session
from src.rm_common.enums import LeaderboardType
from src.rm_common.errors import EventNotFoundError, InsufficientFundsError
from src.rm_gateway.api import router as gateway_api
from src.rm_gateway.auth.dependencies import get_current_user
from src.rm_gateway.user.db_models import UserModel
from src.rm_leaderboard.api import router as leaderboard_api
from src.rm_leaderboard.application.schemas import LeaderboardResponse
from src.rm_wager.api import router as wager_api


def _user(is_admin: bool = False) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "alice"
    user.email = "alice@example.com"
    user.is_active = True
    user.is_admin = is_admin
    return user


async def _fake_db():  # type: ignore[no-untyped-def]
    yield AsyncMock()


@pytest.fixture
def as_user() -> UserModel:
    user = _user()
    app.dependency_overrides[get_db_session] = _fake_db
    app.dependency_overrides[get_current_user] = lambda: user
    return user


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_bets_require_token(client: AsyncClient) -> None:
    app.dependency_overrides[get_db_session] = _fake_db
    resp = await client.get("/api/v1/bets")
    assert resp.status_code == 401


async def test_admin_routes_reject_regular_users(client: AsyncClient, as_user: UserModel) -> None:
    resp = await client.get("/api/v1/admin/stats")

    assert resp.status_code == 403
    body = resp.json()
    assert body["code"] == 1006
    assert body["data"]["kind"] == "AdminRequired"


async def test_unknown_event_uses_error_envelope(
    client: AsyncClient, as_user: UserModel, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        catalog_api._service, "get_event", AsyncMock(side_effect=EventNotFoundError("EVT-404"))
    )

    resp = await client.get("/api/v1/events/EVT-404")

    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == 3001
    assert body["data"] == {"kind": "EventNotFound", "event_id": "EVT-404"}
    assert body["request_id"].startswith("req_")
    assert resp.headers["X-Request-ID"] == body["request_id"]


async def test_insufficient_funds_context(
    client: AsyncClient, as_user: UserModel, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        wager_api._service, "place_bet", AsyncMock(side_effect=InsufficientFundsError(1500, 1000))
    )

    resp = await client.post(
        "/api/v1/bets", json={"event_id": "EVT-1", "option_id": "OPT-1", "amount": 1500}
    )

    assert resp.status_code == 422
    assert resp.json()["data"] == {"kind": "InsufficientFunds", "required": 1500, "available": 1000}


async def test_malformed_body_is_validation_error(client: AsyncClient, as_user: UserModel) -> None:
    resp = await client.post(
        "/api/v1/bets", json={"event_id": "EVT-1", "option_id": "OPT-1", "amount": "lots"}
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 9003
    assert body["data"] == {"kind": "ValidationError", "field": "amount"}


async def test_place_bet_passes_caller_identity(
    client: AsyncClient, as_user: UserModel, monkeypatch: pytest.MonkeyPatch
) -> None:
    place_bet = AsyncMock(side_effect=InsufficientFundsError(100, 0))
    monkeypatch.setattr(wager_api._service, "place_bet", place_bet)

    await client.post("/api/v1/bets", json={"event_id": "EVT-1", "option_id": "OPT-1", "amount": 100})

    args = place_bet.await_args.args
    assert args[1:] == (str(as_user.id), "EVT-1", "OPT-1", 100)


async def test_leaderboard_is_public(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    app.dependency_overrides[get_db_session] = _fake_db
    get_leaderboard = AsyncMock(return_value=LeaderboardResponse(type="wins", items=[]))
    monkeypatch.setattr(leaderboard_api._service, "get_leaderboard", get_leaderboard)

    resp = await client.get("/api/v1/leaderboard", params={"type": "wins", "limit": 10})

    assert resp.status_code == 200
    assert resp.json()["data"] == {"type": "wins", "period": None, "items": []}
    assert get_leaderboard.await_args.args[1:] == (LeaderboardType.WINS, 10, 0)


async def test_unknown_leaderboard_type_rejected(client: AsyncClient) -> None:
    app.dependency_overrides[get_db_session] = _fake_db

    resp = await client.get("/api/v1/leaderboard", params={"type": "losses"})

    assert resp.status_code == 422
    assert resp.json()["data"]["field"] == "query.type"


async def test_profile_shows_balance_and_recent_activity(
    client: AsyncClient, as_user: UserModel, monkeypatch: pytest.MonkeyPatch
) -> None:
    entry = LedgerEntry(
        id=7,
        user_id=as_user.account_id,
        entry_type="BET_PLACED",
        amount=-200,
        balance_after=11500,
        reference_type="BET",
        reference_id="BET-1",
        description="bet placed",
    )
    get_profile = AsyncMock(return_value=(Account(as_user.account_id, 11500, 1000, 2), [entry]))
    monkeypatch.setattr(gateway_api._service, "get_profile", get_profile)

    resp = await client.get("/api/v1/auth/me")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["last_login_at"] is None
    assert data["balance_display"] == "11.500"
    assert [e["amount"] for e in data["recent_activity"]] == [-200]


async def test_profile_requires_token(client: AsyncClient) -> None:
    app.dependency_overrides[get_db_session] = _fake_db
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401
