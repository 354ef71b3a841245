"""rm_catalog REST endpoints.

GET /events                list (status filter, default ACTIVE; ALL for no filter)
GET /events/{event_id}     detail with options and wager stats
GET /categories            category lookup table
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rm_catalog.application.service import MAX_LIST_LIMIT, EventCatalogService
from src.rm_catalog.infrastructure.categories import CategoryStore, get_category_store
from src.rm_common.database import get_db_session
from src.rm_common.response import ApiResponse, success_response

router = APIRouter(tags=["events"])

_service = EventCatalogService()


@router.get("/events")
async def list_events(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: str | None = Query(
        None, description="Filter by status. Default: ACTIVE. Use ALL for no filter."
    ),
    category: str | None = Query(None),
    limit: int = Query(20, ge=1, le=MAX_LIST_LIMIT),
) -> ApiResponse:
    result = await _service.list_events(db, status, category, limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/events/{event_id}")
async def get_event(
    event_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_event(db, event_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/categories")
async def list_categories(
    request: Request,
    store: Annotated[CategoryStore, Depends(get_category_store)],
) -> ApiResponse:
    result = await _service.list_categories(store)
    resp = success_response([c.model_dump() for c in result])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
