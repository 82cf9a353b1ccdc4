"""
Async HTTP client for the Zoom Automator control API.

Used by scripts and by anything that needs to drive the automator from
another process, e.g.:

    async with AutomatorClient() as client:
        if await client.check_health():
            await client.join()
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.core.logging import get_logger

logger = get_logger("client")

DEFAULT_TIMEOUT = 30.0
HEALTH_TIMEOUT = 5.0
# Extra time on top of the server-side login and join windows
SERVER_TIMEOUT_MARGIN = 30.0


class AutomatorClientError(Exception):
    """
    Raised when a control API call fails.

    ``code`` is one of CONNECTION_REFUSED, TIMEOUT, NETWORK_ERROR,
    SERVER_ERROR or UNKNOWN.
    """

    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN = "UNKNOWN"

    def __init__(self, message: str, code: str = UNKNOWN, status_code: Optional[int] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class AutomatorClient:
    """Thin wrapper around ``httpx.AsyncClient`` for the control API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or f"http://{settings.server.host}:{settings.server.port}"
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "AutomatorClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http_client.aclose()

    async def _request(self, method: str, path: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        try:
            response = await self._http_client.request(method, path, timeout=timeout or self.timeout)
        except httpx.ConnectError as e:
            raise AutomatorClientError(
                f"Zoom automator is not running at {self.base_url}",
                AutomatorClientError.CONNECTION_REFUSED,
            ) from e
        except httpx.TimeoutException as e:
            raise AutomatorClientError(f"Request to {path} timed out", AutomatorClientError.TIMEOUT) from e
        except httpx.TransportError as e:
            raise AutomatorClientError(f"Network error: {e}", AutomatorClientError.NETWORK_ERROR) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400 or data.get("success") is False:
            message = data.get("error") or f"HTTP {response.status_code}"
            code = AutomatorClientError.SERVER_ERROR if response.status_code >= 500 else AutomatorClientError.UNKNOWN
            raise AutomatorClientError(message, code, status_code=response.status_code)

        return data

    async def check_health(self) -> bool:
        """Return True if the automator answers /health."""
        try:
            data = await self._request("GET", "/health", timeout=HEALTH_TIMEOUT)
        except AutomatorClientError as e:
            logger.debug(f"Health check failed: {e.message}")
            return False
        return data.get("success") is True

    async def get_status(self) -> Optional[str]:
        """Display label (e.g. "In Meeting"), or None if the automator is unreachable."""
        try:
            data = await self._request("GET", "/status")
        except AutomatorClientError as e:
            logger.debug(f"Status request failed: {e.message}")
            return None
        return data.get("status")

    async def login(self) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/login",
            timeout=settings.automator.login_timeout_seconds + SERVER_TIMEOUT_MARGIN,
        )

    async def join(self) -> Dict[str, Any]:
        automator = settings.automator
        join_budget = automator.join_attempt_timeout_seconds * automator.join_max_attempts
        return await self._request("POST", "/meeting/join", timeout=max(self.timeout, join_budget + SERVER_TIMEOUT_MARGIN))

    async def leave(self) -> Dict[str, Any]:
        return await self._request("POST", "/meeting/leave")

    async def shutdown(self) -> Dict[str, Any]:
        return await self._request("POST", "/shutdown")
