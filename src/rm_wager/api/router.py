"""rm_wager REST endpoints. All require JWT authentication.

POST /bets   place a bet on one option of an event
GET  /bets   own bet history, newest first
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.database import get_db_session
from src.rm_common.enums import BetStatus
from src.rm_common.response import ApiResponse, success_response
from src.rm_gateway.auth.dependencies import get_current_user
from src.rm_gateway.user.db_models import UserModel
from src.rm_wager.application.schemas import PlaceBetRequest
from src.rm_wager.application.service import WagerService

router = APIRouter(prefix="/bets", tags=["bets"])

_service = WagerService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_bet(
    body: PlaceBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bet(
        db, str(current_user.id), body.event_id, body.option_id, body.amount
    )
    resp = success_response(result.model_dump(), message="Bet placed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_bets(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    bet_status: BetStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_user_bets(
        db,
        str(current_user.id),
        bet_status.value if bet_status else None,
        cursor,
        limit,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
