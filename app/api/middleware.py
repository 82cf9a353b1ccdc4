"""
Request context middleware: request ids, no-store caching and request logs.
"""

import time
import uuid

from fastapi import Request
from fastapi.responses import Response

from app.api.errors import error_response
from app.core.logging import format_event, get_logger

logger = get_logger("api.requests")

REQUEST_ID_HEADER = "X-Request-ID"


async def request_context_middleware(request: Request, call_next) -> Response:
    """
    Tag the request with an id, log its start and end, and turn any
    exception the handlers did not map into the standard error body.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id
    started_at = time.perf_counter()

    logger.info(format_event("request start", request_id=request_id, method=request.method, path=request.url.path))

    try:
        response = await call_next(request)
    except Exception as e:
        response = error_response(request, e)

    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["Cache-Control"] = "no-store"

    logger.info(
        format_event(
            "request end",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started_at) * 1000, 1),
        )
    )
    return response
