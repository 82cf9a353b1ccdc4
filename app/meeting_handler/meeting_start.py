"""
Zoom Meeting-Start Procedure

Starts a fresh placeholder meeting in the Zoom web client:
- Authentication check
- Navigate to the web client home
- Turn off "Use PMI" so every meeting gets a disposable ID
- Click "New Meeting" and follow a possible new tab
- Click through the entry-prompt cascade
- Make sure mic and camera are off
- Wait until the meeting looks active
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Locator, Page

from app.config import AutomatorSettings
from app.core.exceptions import AuthenticationRequiredError, MeetingStartError
from app.core.logging import format_event, get_logger
from .auth import ensure_authenticated
from .deadline import Deadline
from .diagnostics import SnapshotRecorder, page_diagnostics
from .navigation import (
    find_across_frames,
    find_first_visible,
    safe_click,
    try_click,
    try_click_across_frames,
    try_click_labelled,
)
from .session import BrowserSessionManager
from .state import AutomatorStateMachine
from .zoom_selectors import (
    CAMERA_LABEL,
    FRAME_ENTRY_PROMPTS,
    FRAME_IN_MEETING_PROMPTS,
    FRAME_MEETING_SIGNALS,
    HOME_ROUTE,
    MEETING_ROUTE,
    MEETING_TITLE,
    MIC_LABEL,
    PRE_JOIN_FRAME_TEXT,
    TURN_OFF_LABEL,
    get_selectors_for,
    is_home_or_signin,
    page_signals,
)

logger = get_logger("meeting_start")

AUTH_REQUIRED_MESSAGE = "Zoom login required. Run POST /auth/login and complete MFA once."

# Per-step budgets (seconds); each is further capped by the attempt deadline
PMI_STEP_TIMEOUT = 8
CREATE_STEP_TIMEOUT = 12
ENTRY_PROMPTS_STEP_TIMEOUT = 12
MIC_CAMERA_STEP_TIMEOUT = 8
ACTIVE_SIGNAL_STEP_TIMEOUT = 30

POLL_LOG_INTERVAL = 3.0
TITLE_SIGNAL = "title-zoom-meeting"


@dataclass
class SignalEvaluation:
    """One poll of the "is the meeting live?" heuristic."""
    url: str
    moved_off_home: bool
    pre_join_visible: bool
    matched_signal: Optional[str] = None
    strong: bool = False

    def accepted(self, require_strong: bool = False) -> bool:
        """
        A signal counts when the page left home/sign-in and either the
        signal is strong or no pre-join prompt is still showing (prompt
        text can itself match a weak signal).
        """
        if not (self.moved_off_home and self.matched_signal):
            return False
        if self.strong:
            return True
        if require_strong:
            return False
        return not self.pre_join_visible


class MeetingStartProcedure:
    """Runs the ordered meeting-start steps against the shared session."""

    def __init__(
        self,
        session: BrowserSessionManager,
        state: AutomatorStateMachine,
        config: AutomatorSettings,
        snapshots: SnapshotRecorder,
    ) -> None:
        self.session = session
        self.state = state
        self.config = config
        self.snapshots = snapshots

    def _log(self, level: str, event: str, **fields) -> None:
        getattr(logger, level)(format_event(event, **self.state.log_fields(), **fields))

    async def run(self, deadline: Deadline, attempt: int = 1) -> Page:
        """
        Start a meeting and return the page it runs in.

        Raises:
            AuthenticationRequiredError: the profile is logged out
            MeetingStartError: a required control was not found, or the
                meeting never looked active
            AutomationTimeoutError: a step ran past its deadline
        """
        nav_timeout = self.config.navigation_timeout_seconds
        page = await self.session.get_page()

        self._log("debug", "join check authentication", attempt=attempt)
        authed = await deadline.child(nav_timeout).run(
            ensure_authenticated(page, self.config.home_url, self.state, nav_timeout),
            "Timed out checking Zoom authentication",
        )
        if not authed:
            raise AuthenticationRequiredError(AUTH_REQUIRED_MESSAGE)

        self._log("debug", "join navigate home", attempt=attempt)
        await deadline.child(nav_timeout).run(
            self._navigate_home(page, nav_timeout),
            "goto: Timeout navigating to Zoom home",
        )

        self._log("debug", "join disable PMI", attempt=attempt)
        await self._best_effort(deadline.child(PMI_STEP_TIMEOUT), self._disable_use_pmi(page), "disable PMI")

        self._log("debug", "join start new meeting click", attempt=attempt)
        meeting_page = await deadline.child(CREATE_STEP_TIMEOUT).run(
            self._start_new_meeting(page),
            "Timed out starting new meeting",
        )
        self._log("debug", "join active page selected", attempt=attempt, url=meeting_page.url)

        await self._best_effort(
            deadline.child(ENTRY_PROMPTS_STEP_TIMEOUT),
            self._handle_entry_prompts(meeting_page),
            "entry prompts",
        )

        self._log("debug", "join ensure mic/camera off", attempt=attempt)
        await self._best_effort(
            deadline.child(MIC_CAMERA_STEP_TIMEOUT),
            self._ensure_mic_and_camera_off(meeting_page),
            "mic/camera prep",
        )

        self._log("debug", "join wait for meeting started", attempt=attempt)
        return await deadline.child(ACTIVE_SIGNAL_STEP_TIMEOUT).run(
            self._wait_for_meeting_started(meeting_page),
            "Timed out waiting for meeting-start checks",
        )

    async def _best_effort(self, deadline: Deadline, step, label: str) -> None:
        try:
            await deadline.run(step, f"Timed out: {label}")
        except Exception as e:
            self._log("warning", f"join {label} skipped", error=str(e))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _navigate_home(self, page: Page, timeout: float) -> None:
        if not HOME_ROUTE.search(page.url):
            await page.goto(self.config.home_url, wait_until="domcontentloaded", timeout=timeout * 1000)
        await asyncio.sleep(self.config.ui_settle_seconds)

    async def _disable_use_pmi(self, page: Page) -> None:
        """Turn the sticky "Use PMI" option off if the meeting menu shows it on."""
        probe = self.config.control_probe_timeout_seconds
        menu_opened = await try_click(page, get_selectors_for("meeting_options_menu"), probe)
        if not menu_opened:
            logger.debug("Meeting options menu not found, leaving PMI setting as is")
            return

        await asyncio.sleep(0.3)

        found = await find_first_visible(page, get_selectors_for("use_pmi_toggle"), probe)
        if found:
            toggle = found[1]
            if await self._is_checked(toggle):
                await toggle.click(timeout=1500)
                logger.info("Turned off 'Use PMI'")
                await asyncio.sleep(0.2)
            else:
                logger.debug("'Use PMI' already off")

        await self._press_escape(page)

    @staticmethod
    async def _is_checked(toggle: Locator) -> bool:
        if await toggle.get_attribute("aria-checked") == "true":
            return True
        if await toggle.get_attribute("type") == "checkbox":
            try:
                return await toggle.is_checked()
            except Exception:
                return False
        return False

    @staticmethod
    async def _press_escape(page: Page) -> None:
        try:
            await page.keyboard.press("Escape")
        except Exception as e:
            logger.debug(f"Escape press failed: {e}")

    async def _start_new_meeting(self, page: Page) -> Page:
        """
        Click "New Meeting" and return the page the meeting opens in.

        Zoom sometimes opens the meeting in a new tab; if none appears within
        the new-page window the current page is used.
        """
        found = await find_first_visible(
            page, get_selectors_for("new_meeting_button"), self.config.control_probe_timeout_seconds
        )
        if not found:
            raise MeetingStartError("Unable to find a New Meeting button in Zoom web app")

        new_page = asyncio.ensure_future(self.session.wait_for_new_page(self.config.new_page_timeout_seconds))
        try:
            if not await safe_click(found[1]):
                raise MeetingStartError("New Meeting button could not be clicked")
            created = await new_page
        finally:
            if not new_page.done():
                new_page.cancel()

        candidate = created or page
        await asyncio.sleep(self.config.ui_settle_seconds)
        await self.snapshots.capture(candidate, "after-new-meeting-click")
        self.session.set_page(candidate)
        return candidate

    async def _handle_entry_prompts(self, page: Page) -> None:
        """Click through any start/continue/audio prompt currently showing."""
        probe = self.config.prompt_probe_timeout_seconds
        try:
            await try_click_across_frames(page, FRAME_ENTRY_PROMPTS, probe)
            await try_click_labelled(page, get_selectors_for("entry_prompts"), probe)
            await try_click_labelled(page, get_selectors_for("audio_prompts"), probe)
        except Exception as e:
            logger.debug(f"Entry prompt handling failed: {e}")

    async def _handle_in_meeting_prompts(self, page: Page) -> None:
        probe = self.config.prompt_probe_timeout_seconds
        try:
            await try_click_across_frames(page, FRAME_IN_MEETING_PROMPTS, probe)
            await try_click_labelled(page, get_selectors_for("in_meeting_prompts"), probe)
        except Exception as e:
            logger.debug(f"In-meeting prompt handling failed: {e}")

    async def _ensure_mic_and_camera_off(self, page: Page) -> None:
        await self._turn_off_control(page, MIC_LABEL, "mic_on_fallback")
        await self._turn_off_control(page, CAMERA_LABEL, "camera_on_fallback")

    async def _turn_off_control(self, page: Page, label, fallback_key: str) -> None:
        candidates = [
            page.locator('button[aria-pressed="true"]').filter(has_text=label),
            page.locator("button[aria-label]").filter(has_text=label).filter(has_text=TURN_OFF_LABEL),
        ]
        for locator in candidates:
            if await locator.count() == 0:
                continue
            await safe_click(locator.first, timeout=1.0)
            await asyncio.sleep(0.15)
            return

        await try_click(page, get_selectors_for(fallback_key), self.config.prompt_probe_timeout_seconds)

    # ------------------------------------------------------------------
    # Active-meeting detection
    # ------------------------------------------------------------------

    def _most_likely_meeting_page(self, fallback: Page) -> Page:
        pages = self.session.pages()
        if not pages:
            return fallback

        for page in pages:
            if MEETING_ROUTE.search(page.url):
                return page

        for page in pages:
            if not is_home_or_signin(page.url):
                return page

        return pages[0]

    async def _has_pre_join_prompt(self, page: Page) -> bool:
        if await find_first_visible(page, get_selectors_for("pre_join_signals"), 0.25):
            return True
        return await find_across_frames(page, PRE_JOIN_FRAME_TEXT) is not None

    async def _find_meeting_ui_signal_across_frames(self, page: Page) -> Optional[str]:
        for name, text in FRAME_MEETING_SIGNALS:
            if await find_across_frames(page, [text], 0.18):
                return name
        return None

    async def evaluate_signals(self, page: Page) -> SignalEvaluation:
        """Collect the weak and strong "meeting is live" observations."""
        url = page.url
        evaluation = SignalEvaluation(
            url=url,
            moved_off_home=not is_home_or_signin(url),
            pre_join_visible=await self._has_pre_join_prompt(page),
        )

        frame_signal = await self._find_meeting_ui_signal_across_frames(page)
        if frame_signal:
            evaluation.matched_signal = f"frame:{frame_signal}"
            evaluation.strong = True
            return evaluation

        for signal in page_signals(self.config.weak_signals):
            if await find_first_visible(page, [signal.strategy], 0.35):
                evaluation.matched_signal = signal.name
                evaluation.strong = signal.strong
                return evaluation

        try:
            title = await page.title()
        except Exception:
            title = ""
        if MEETING_TITLE.search(title) and MEETING_ROUTE.search(url):
            evaluation.matched_signal = TITLE_SIGNAL
            evaluation.strong = TITLE_SIGNAL not in self.config.weak_signals

        return evaluation

    async def _wait_for_meeting_started(self, initial_page: Page) -> Page:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.meeting_start_timeout_seconds
        last_poll_log: Optional[float] = None

        while loop.time() < deadline:
            page = self._most_likely_meeting_page(initial_page)
            self.session.set_page(page)
            await self._handle_entry_prompts(page)
            await self._handle_in_meeting_prompts(page)

            evaluation = await self.evaluate_signals(page)
            if evaluation.accepted(self.config.require_strong_signal):
                diagnostics = await page_diagnostics(page, len(self.session.pages()))
                self._log(
                    "debug",
                    "wait for meeting started success",
                    matched_signal=evaluation.matched_signal,
                    strong=evaluation.strong,
                    pre_join_visible=evaluation.pre_join_visible,
                    **diagnostics,
                )
                await self.snapshots.capture(page, "meeting-start-detected")
                return page

            if last_poll_log is None or loop.time() - last_poll_log > POLL_LOG_INTERVAL:
                last_poll_log = loop.time()
                diagnostics = await page_diagnostics(page, len(self.session.pages()))
                self._log(
                    "debug",
                    "wait for meeting started polling",
                    matched_signal=evaluation.matched_signal,
                    strong=evaluation.strong,
                    pre_join_visible=evaluation.pre_join_visible,
                    **diagnostics,
                )
                await self.snapshots.capture(page, "meeting-start-polling")

            await asyncio.sleep(0.25)

        page = self._most_likely_meeting_page(initial_page)
        diagnostics = await page_diagnostics(page, len(self.session.pages()))
        self._log("error", "wait for meeting started timeout diagnostics", **diagnostics)
        await self.snapshots.capture(page, "meeting-start-timeout")
        raise MeetingStartError("Zoom meeting did not reach an active state in time")
