"""Admin REST API. Every route requires an admin caller."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_account.application.schemas import PointsAdjustmentRequest
from src.rm_admin.application.service import AdminService
from src.rm_catalog.application.schemas import CreateEventRequest
from src.rm_common.database import get_db_session
from src.rm_common.response import ApiResponse, success_response
from src.rm_gateway.auth.dependencies import require_admin
from src.rm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class ResolveRequest(BaseModel):
    winning_option_id: str


class SetAdminRequest(BaseModel):
    is_admin: bool


def _with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    body: CreateEventRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_event(db, body.to_domain(), str(admin.id))
    return _with_request_id(success_response(result.model_dump(), "Event created"), request)


@router.post("/events/{event_id}/toggle")
async def toggle_event(
    event_id: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.toggle_event(db, event_id)
    return _with_request_id(success_response(result.model_dump()), request)


@router.delete("/events/{event_id}")
async def delete_event(
    event_id: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete_event(db, event_id)
    return _with_request_id(success_response({"event_id": event_id}, "Event deleted"), request)


@router.post("/events/{event_id}/resolve")
async def resolve_event(
    event_id: str,
    body: ResolveRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_event(db, event_id, body.winning_option_id)
    return _with_request_id(success_response(result.to_dict(), "Event resolved"), request)


@router.post("/users/{user_id}/points")
async def adjust_points(
    user_id: str,
    body: PointsAdjustmentRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.adjust_points(db, user_id, body.amount, body.reason, str(admin.id))
    return _with_request_id(success_response(result.model_dump()), request)


@router.post("/users/{user_id}/toggle-active")
async def toggle_user_active(
    user_id: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.toggle_user_active(db, user_id, str(admin.id))
    return _with_request_id(success_response(result), request)


@router.post("/users/{user_id}/admin")
async def set_admin(
    user_id: str,
    body: SetAdminRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_admin(db, user_id, body.is_admin, str(admin.id))
    return _with_request_id(success_response(result), request)


@router.get("/stats")
async def get_stats(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return _with_request_id(success_response(await _service.get_stats(db)), request)


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return _with_request_id(success_response(await _service.verify_all_invariants(db)), request)
