"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.rm_account.api.router import router as account_router
from src.rm_admin.api.router import router as admin_router
from src.rm_catalog.api.router import router as catalog_router
from src.rm_catalog.infrastructure.categories import close_category_store, get_category_store
from src.rm_common.database import async_session_factory, engine, ping_database
from src.rm_common.errors import AppError, InvalidInputError, StorageError
from src.rm_common.response import error_response
from src.rm_gateway.api.router import router as auth_router
from src.rm_gateway.middleware.request_log import RequestLogMiddleware
from src.rm_gateway.user.service import UserService
from src.rm_leaderboard.api.router import router as leaderboard_router
from src.rm_wager.api.router import router as wager_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, seed categories, bootstrap admin. Shutdown: dispose."""
    # Startup
    await ping_database()
    await (await get_category_store()).seed_defaults()
    async with async_session_factory() as db:
        await UserService().ensure_bootstrap_admin(db)
    yield
    # Shutdown
    await engine.dispose()
    await close_category_store()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.kind, exc.context)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or "request"
    return _error_json(request, InvalidInputError(field, first.get("msg", "invalid value")))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # SQL text and parameters stay in the log, never in the response
    logger.exception("Unhandled storage error on %s %s", request.method, request.url.path)
    return _error_json(request, StorageError())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(wager_router, prefix="/api/v1")
app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
