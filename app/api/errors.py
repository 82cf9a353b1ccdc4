"""
Error responses for the control API.

Every failure is answered with the same JSON shape, including the automator
state at the time of the failure, so the extension can show why a request
failed without a second /status call.
"""

import re
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.schemas import ErrorResponse
from app.core.dependencies import get_automator_instance, get_request_id
from app.core.exceptions import AuthenticationError, ZoomAutomatorException
from app.core.logging import format_event, get_logger

logger = get_logger("api.errors")

_AUTH_MESSAGE = re.compile(r"login required|auth_required", re.IGNORECASE)


def status_code_for(error: BaseException) -> int:
    """401 for authentication problems, 500 for everything else."""
    if isinstance(error, AuthenticationError) or _AUTH_MESSAGE.search(str(error)):
        return 401
    return 500


def error_response(request: Request, error: BaseException, status_code: Optional[int] = None) -> JSONResponse:
    status_code = status_code or status_code_for(error)
    request_id = get_request_id(request)
    message = str(error) or "Unknown error"

    body = ErrorResponse(error=message, request_id=request_id)
    automator = get_automator_instance()
    if automator is not None:
        snapshot = automator.get_status()
        body.automator_state = snapshot.state.value
        body.automator_message = snapshot.message
        body.authenticated = snapshot.authenticated
        body.in_meeting = snapshot.in_meeting

    logger.error(
        format_event(
            "request failed",
            request_id=request_id,
            status=status_code,
            message=message,
            automator_state=body.automator_state,
        ),
        exc_info=error if status_code >= 500 and not isinstance(error, ZoomAutomatorException) else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def automator_exception_handler(request: Request, exc: ZoomAutomatorException) -> JSONResponse:
    return error_response(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "requestId": get_request_id(request), "error": error},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ZoomAutomatorException, automator_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
