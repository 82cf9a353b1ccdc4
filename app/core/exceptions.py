"""
Custom exceptions for the Zoom presence automator.
"""

import re
from typing import Any, Dict, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ZoomAutomatorException(Exception):
    """Base exception for automator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(ZoomAutomatorException):
    """Raised when the Zoom session is not (or could not be) authenticated."""
    pass


class AuthenticationRequiredError(AuthenticationError):
    """Raised when a join finds the persistent profile logged out."""
    pass


class LoginTimeoutError(AuthenticationError):
    """Raised when interactive login does not complete in time."""
    pass


class AutomationTimeoutError(ZoomAutomatorException):
    """Raised when a bounded automation step exceeds its deadline."""
    pass


class MeetingStartError(ZoomAutomatorException):
    """Raised when a required meeting-start step cannot be performed."""
    pass


class SessionError(ZoomAutomatorException):
    """Raised when the browser session cannot be opened or used."""
    pass


_TIMEOUT_MESSAGE = re.compile(r"goto: Timeout|Timeout \d+ms exceeded|Timed out", re.IGNORECASE)


def is_retryable_timeout(error: BaseException) -> bool:
    """
    Classify an error as a navigation/step timeout eligible for a join retry.

    Authentication failures are never retryable, even if their message
    happens to mention a timeout.
    """
    if isinstance(error, AuthenticationError):
        return False
    if isinstance(error, (AutomationTimeoutError, PlaywrightTimeoutError)):
        return True
    return bool(_TIMEOUT_MESSAGE.search(str(error)))
