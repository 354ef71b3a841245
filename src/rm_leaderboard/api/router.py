"""rm_leaderboard REST endpoint: GET /leaderboard?type=points|wins|winnings|monthly"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_common.database import get_db_session
from src.rm_common.enums import LeaderboardType
from src.rm_common.response import ApiResponse, success_response
from src.rm_leaderboard.application.service import MAX_LIMIT, LeaderboardService

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

_service = LeaderboardService()


@router.get("")
async def get_leaderboard(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    board: LeaderboardType = Query(LeaderboardType.POINTS, alias="type"),
    limit: int = Query(50, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    result = await _service.get_leaderboard(db, board, limit, offset)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
