"""Per-request correlation id and access log.

Each request gets `request.state.request_id` (`req_` + 12 hex chars); routers
copy it into ApiResponse.request_id and it is echoed in the X-Request-ID
response header. One log line per request:

    [POST] /api/v1/bets 201 23ms req_a1b2c3d4e5f6

5xx responses log at ERROR, 4xx at WARNING, everything else at INFO.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("rm.request")

REQUEST_ID_HEADER = "X-Request-ID"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s unhandled %.0fms %s",
                request.method, request.url.path, (time.perf_counter() - start) * 1000, request_id,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            _level_for(response.status_code),
            "[%s] %s %d %.0fms %s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
            request_id,
        )
        return response
