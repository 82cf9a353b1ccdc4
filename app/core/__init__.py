"""
Core module exports.
"""

from .exceptions import (
    ZoomAutomatorException,
    AuthenticationError,
    AuthenticationRequiredError,
    LoginTimeoutError,
    AutomationTimeoutError,
    MeetingStartError,
    SessionError,
    is_retryable_timeout,
)
from .logging import logger, get_logger, setup_logging, format_event

__all__ = [
    "ZoomAutomatorException",
    "AuthenticationError",
    "AuthenticationRequiredError",
    "LoginTimeoutError",
    "AutomationTimeoutError",
    "MeetingStartError",
    "SessionError",
    "is_retryable_timeout",
    "logger",
    "get_logger",
    "setup_logging",
    "format_event",
]
