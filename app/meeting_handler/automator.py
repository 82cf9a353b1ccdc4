"""
Zoom Automator

Main coordinator that owns the shared browser session and exposes the
public operations used by the control API:
- login: interactive (headed) sign-in saved in the persistent profile
- join: start the placeholder presence meeting
- leave: tear the session down
- dispose: shutdown cleanup

All operations run one at a time through the operation queue.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from playwright.async_api import async_playwright

from app.config import AutomatorSettings, settings
from app.core.exceptions import (
    AuthenticationError,
    LoginTimeoutError,
    is_retryable_timeout,
)
from app.core.logging import format_event, get_logger
from app.domain.models import AutomatorState, StatusSnapshot
from .auth import is_authenticated
from .deadline import Deadline
from .diagnostics import SnapshotRecorder
from .meeting_start import MeetingStartProcedure
from .queue import OperationQueue
from .session import BrowserSessionManager
from .state import AutomatorStateMachine

logger = get_logger("automator")


class ZoomAutomator:
    """
    Serializes login/join/leave/dispose against one browser session.

    Usage pattern:
        automator = ZoomAutomator()
        await automator.login()
        await automator.join()
        await automator.leave()
        await automator.dispose()
    """

    def __init__(
        self,
        config: Optional[AutomatorSettings] = None,
        playwright_factory: Callable = async_playwright,
    ) -> None:
        self.config = config or settings.automator
        self.state = AutomatorStateMachine()
        self.session = BrowserSessionManager(
            self.config,
            on_session_lost=self.state.session_lost,
            playwright_factory=playwright_factory,
        )
        self.snapshots = SnapshotRecorder(self.config.debug_dir, enabled=self.config.capture_snapshots)
        self.procedure = MeetingStartProcedure(self.session, self.state, self.config, self.snapshots)
        self._queue = OperationQueue()

        self._log("info", "initialized automator", user_data_dir=str(self.session.user_data_dir))

    def _log(self, level: str, event: str, **fields) -> None:
        getattr(logger, level)(format_event(event, **self.state.log_fields(), **fields))

    def get_status(self) -> StatusSnapshot:
        """Current status snapshot (never blocks on the queue)."""
        return self.state.snapshot()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def login(self, timeout: Optional[float] = None) -> StatusSnapshot:
        """Open a visible browser on the sign-in page and wait for the user to log in."""
        return await self._queue.submit("login", lambda: self._login(timeout))

    async def join(self) -> StatusSnapshot:
        """Start the presence meeting; a no-op if one is already running."""
        return await self._queue.submit("join", self._join)

    async def leave(self) -> StatusSnapshot:
        """End the presence meeting by closing the whole browser session."""
        return await self._queue.submit("leave", self._leave)

    async def dispose(self) -> StatusSnapshot:
        """Close everything at process shutdown."""
        return await self._queue.submit("dispose", self._dispose)

    # ------------------------------------------------------------------
    # Operation bodies (always run inside the queue)
    # ------------------------------------------------------------------

    async def _login(self, timeout: Optional[float]) -> StatusSnapshot:
        timeout = timeout if timeout is not None else self.config.login_timeout_seconds
        self._log("info", "login start", timeout=timeout)
        self.state.transition(state=AutomatorState.STARTING, message="Waiting for interactive login")

        try:
            await self.session.close_session()
            await self.session.ensure_session(headless=False)
            page = await self.session.get_page()
            await page.goto(self.config.signin_url, wait_until="domcontentloaded")

            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout
            while loop.time() < deadline:
                if not self.session.has_session:
                    raise AuthenticationError("Login window was closed before completion")
                if await is_authenticated(page):
                    self.state.transition(
                        authenticated=True,
                        state=AutomatorState.IN_MEETING if self.state.in_meeting else AutomatorState.AVAILABLE,
                        message="Login completed",
                    )
                    self._log("info", "login authenticated")
                    await self.session.close_session()
                    return self.get_status()
                await asyncio.sleep(self.config.login_poll_interval_seconds)

            self.state.transition(
                authenticated=False,
                state=AutomatorState.AUTH_REQUIRED,
                message="Login timed out before completion",
            )
            self._log("warning", "login timeout")
            raise LoginTimeoutError("Timed out waiting for Zoom login completion")
        except Exception as e:
            if isinstance(e, AuthenticationError):
                self.state.transition(authenticated=False, state=AutomatorState.AUTH_REQUIRED, message=str(e))
            elif self.state.state is not AutomatorState.AUTH_REQUIRED:
                self.state.transition(state=AutomatorState.ERROR, message=f"Login failed: {e}")
            self._log("error", "login failed", error=str(e))
            await self.session.close_session()
            raise

    async def _join(self) -> StatusSnapshot:
        self._log("info", "join start")
        if self.state.in_meeting:
            self.state.transition(state=AutomatorState.IN_MEETING, message="Automation meeting already running")
            self._log("info", "join already active")
            return self.get_status()

        self.state.transition(state=AutomatorState.STARTING, message="Starting automation meeting")

        try:
            await self._join_with_retry()
        except (Exception, asyncio.CancelledError) as e:
            if isinstance(e, AuthenticationError):
                self.state.transition(authenticated=False, state=AutomatorState.AUTH_REQUIRED, message=str(e))
                self._log("warning", "join auth required")
            elif self.state.state is not AutomatorState.AUTH_REQUIRED:
                self.state.transition(
                    state=AutomatorState.ERROR,
                    message=f"Failed to start automation meeting: {e}",
                )
            self._log("error", "join failed", error=str(e))
            # A failed join must not leave a half-initialized context behind
            await self.session.close_session()
            raise

        self.state.transition(
            in_meeting=True,
            authenticated=True,
            state=AutomatorState.IN_MEETING,
            message="Automation meeting is active",
        )
        self._log("info", "join success")
        return self.get_status()

    async def _join_with_retry(self) -> None:
        max_attempts = self.config.join_max_attempts
        for attempt in range(1, max_attempts + 1):
            deadline = Deadline(self.config.join_attempt_timeout_seconds)
            try:
                await deadline.run(self._join_attempt(deadline, attempt), "Timed out: join attempt deadline exceeded")
                return
            except Exception as e:
                retryable = is_retryable_timeout(e)
                self._log("warning", "join attempt failed", attempt=attempt, retryable=retryable, error=str(e))
                await self.session.close_session()

                if not retryable or attempt >= max_attempts:
                    raise

                await asyncio.sleep(self.config.retry_delay_seconds)

    async def _join_attempt(self, deadline: Deadline, attempt: int) -> None:
        await self.session.ensure_session(headless=self.config.headless)
        self._log("debug", "join context ready", attempt=attempt)
        await self.procedure.run(deadline, attempt)

    async def _leave(self) -> StatusSnapshot:
        self._log("info", "leave start")
        try:
            if not self.session.has_session:
                self.state.reset_to_baseline("No active browser session")
                self._log("info", "leave no active context")
                return self.get_status()

            self.state.transition(state=AutomatorState.STARTING, message="Closing automation browser session")
            await self.session.close_session()
            await asyncio.sleep(self.config.leave_settle_seconds)

            self.state.reset_to_baseline("Automation meeting ended and browser session closed")
            self._log("info", "leave success")
            return self.get_status()
        except Exception as e:
            self.state.transition(state=AutomatorState.ERROR, message=f"Failed to end automation meeting: {e}")
            self._log("error", "leave failed", error=str(e))
            raise

    async def _dispose(self) -> StatusSnapshot:
        self._log("info", "dispose start")
        await self.session.stop()
        self.state.transition(state=AutomatorState.AVAILABLE, in_meeting=False, message="Stopped")
        self._log("info", "dispose complete")
        return self.get_status()
