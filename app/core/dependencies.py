"""
Dependency injection for the control API.
Provides the automator instance and the process-exit hook to endpoints.
"""

import os
import signal
import uuid
from typing import Callable, Optional, TYPE_CHECKING

from fastapi import Depends, Request

from app.core.exceptions import ZoomAutomatorException

if TYPE_CHECKING:
    from app.meeting_handler import ZoomAutomator

_automator_instance: Optional["ZoomAutomator"] = None


def set_automator_instance(instance: Optional["ZoomAutomator"]) -> None:
    """Set the global automator instance."""
    global _automator_instance
    _automator_instance = instance


def get_automator_instance() -> Optional["ZoomAutomator"]:
    """Return the automator without failing when it is not set up yet."""
    return _automator_instance


def get_request_id(request: Request) -> str:
    """Request id assigned by the request-context middleware."""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
    return request_id


async def get_automator() -> "ZoomAutomator":
    """
    Dependency injection for the Zoom automator.

    Raises:
        ZoomAutomatorException: If the automator is not initialized
    """
    if _automator_instance is None:
        raise ZoomAutomatorException("Zoom automator not initialized")

    return _automator_instance


def request_process_exit() -> None:
    """Ask uvicorn to shut down the way Ctrl+C does."""
    os.kill(os.getpid(), signal.SIGINT)


def get_process_exit() -> Callable[[], None]:
    return request_process_exit


AutomatorDep = Depends(get_automator)
