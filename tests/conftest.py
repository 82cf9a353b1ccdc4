import os

# Keep test runs from writing rotating log files into the repo
os.environ["LOG_TO_FILE"] = "false"

import asyncio
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.config import AutomatorSettings

ZOOM_HOME = "https://app.zoom.us/wc/home"
ZOOM_SIGNIN = "https://app.zoom.us/signin"
ZOOM_MEETING = "https://app.zoom.us/wc/81234567890/start"


def _matches(query, text: str, exact: bool = False) -> bool:
    if query is None:
        return True
    if isinstance(query, str):
        return query == text if exact else query.lower() in text.lower()
    return bool(query.search(text))


@dataclass(eq=False)
class FakeElement:
    """One DOM element as seen through role/text/CSS queries."""
    role: str
    text: str
    visible: bool = True
    css: List[str] = field(default_factory=list)
    attrs: Dict[str, str] = field(default_factory=dict)
    on_click: Optional[Callable] = None
    clicks: int = 0


class FakeLocator:
    def __init__(self, elements: List[FakeElement]):
        self.elements = elements

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.elements[:1])

    def filter(self, has_text=None) -> "FakeLocator":
        return FakeLocator([e for e in self.elements if _matches(has_text, e.text)])

    async def count(self) -> int:
        return len(self.elements)

    async def is_visible(self) -> bool:
        return bool(self.elements) and self.elements[0].visible

    async def click(self, timeout=None) -> None:
        # Real clicks round-trip to the browser
        await asyncio.sleep(0)
        if not self.elements or not self.elements[0].visible:
            raise Exception("Element is not attached to the DOM")
        element = self.elements[0]
        element.clicks += 1
        if element.on_click is not None:
            result = element.on_click()
            if asyncio.iscoroutine(result):
                await result

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.elements[0].attrs.get(name) if self.elements else None

    async def is_checked(self) -> bool:
        return bool(self.elements) and self.elements[0].attrs.get("aria-checked") == "true"

    async def evaluate_all(self, script: str, limit: int) -> list:
        return [e.text for e in self.elements if e.visible][:limit]


class FakeFrame:
    def __init__(self, url: str = "about:blank", elements: Optional[List[FakeElement]] = None):
        self.url = url
        self.elements: List[FakeElement] = list(elements or [])

    def add(self, role: str, text: str, **kwargs) -> FakeElement:
        element = FakeElement(role, text, **kwargs)
        self.elements.append(element)
        return element

    def get_by_role(self, role: str, name=None, exact: bool = False) -> FakeLocator:
        return FakeLocator([e for e in self.elements if e.role == role and _matches(name, e.text, exact)])

    def get_by_text(self, text, exact: bool = False) -> FakeLocator:
        return FakeLocator([e for e in self.elements if _matches(text, e.text, exact)])

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator([e for e in self.elements if selector in e.css])


class FakePage(FakeFrame):
    def __init__(self, context=None, url: str = "about:blank", title: str = "Zoom"):
        super().__init__(url)
        self.context = context
        self.page_title = title
        self.child_frames: List[FakeFrame] = []
        self.closed = False
        self.goto_calls: List[str] = []
        self.on_goto: Optional[Callable] = None
        self.handlers: Dict[str, list] = {}
        self.keyboard = MagicMock(press=AsyncMock())
        self.main_frame = self

    @property
    def frames(self) -> List[FakeFrame]:
        return [self] + self.child_frames

    async def goto(self, url: str, wait_until=None, timeout=None) -> None:
        self.goto_calls.append(url)
        self.url = url
        if self.on_goto is not None:
            self.on_goto(self, url)

    async def title(self) -> str:
        return self.page_title

    def is_closed(self) -> bool:
        return self.closed

    async def wait_for_load_state(self, state=None) -> None:
        return None

    async def screenshot(self, **kwargs) -> None:
        return None

    def on(self, event: str, handler) -> None:
        self.handlers.setdefault(event, []).append(handler)


class FakeContext:
    def __init__(self, on_goto: Optional[Callable] = None):
        self.pages: List[FakePage] = []
        self.handlers: Dict[str, list] = {}
        self.browser = None
        self.close_calls = 0
        self.closed = False
        self.hang_on_close = False
        self._on_goto = on_goto
        self._page_waiters: List[asyncio.Future] = []

    def on(self, event: str, handler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event: str, *args) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(*args)

    def open_page(self, url: str = "about:blank") -> FakePage:
        """Open a tab the way a click on a target=_blank link would."""
        page = FakePage(self, url=url)
        page.on_goto = self._on_goto
        self.pages.append(page)
        self.emit("page", page)
        for waiter in self._page_waiters:
            if not waiter.done():
                waiter.set_result(page)
        self._page_waiters.clear()
        return page

    async def new_page(self) -> FakePage:
        return self.open_page()

    async def wait_for_event(self, event: str, timeout: float = 30000):
        waiter = asyncio.get_running_loop().create_future()
        self._page_waiters.append(waiter)
        return await asyncio.wait_for(waiter, timeout / 1000)

    async def close(self) -> None:
        self.close_calls += 1
        if self.hang_on_close:
            await asyncio.Event().wait()
        self._mark_closed()

    def simulate_crash(self) -> None:
        """Browser window closed or crashed underneath the automator."""
        self._mark_closed()

    def _mark_closed(self) -> None:
        self.closed = True
        for page in self.pages:
            page.closed = True
        self.emit("close", self)


class FakePlaywright:
    """Stands in for ``async_playwright``: the factory, the driver and ``chromium``."""

    def __init__(self):
        self.chromium = self
        self.contexts: List[FakeContext] = []
        self.launch_calls: List[dict] = []
        self.stop_calls = 0
        self.launch_error: Optional[Exception] = None
        self.on_goto: Optional[Callable] = None

    def __call__(self) -> "FakePlaywright":
        return self

    async def start(self) -> "FakePlaywright":
        return self

    async def stop(self) -> None:
        self.stop_calls += 1

    async def launch_persistent_context(self, user_data_dir: str, headless: bool = True, viewport=None):
        self.launch_calls.append({"user_data_dir": user_data_dir, "headless": headless, "viewport": viewport})
        if self.launch_error is not None:
            raise self.launch_error
        context = FakeContext(on_goto=self.on_goto)
        context.open_page()
        self.contexts.append(context)
        return context

    @property
    def latest(self) -> FakeContext:
        return self.contexts[-1]


class FakeZoomWebClient:
    """
    ``on_goto`` hook rendering the Zoom web client home page.

    Signed out, home shows a Sign In button and the sign-in page completes
    after ``login_delay``. Signed in, home shows New Meeting (plus the
    options menu holding "Use PMI" when ``pmi_checked`` is set). New Meeting
    opens the meeting in a new tab or in place; the meeting frame shows
    "Start this Meeting" first when ``start_prompt`` is set, and the control
    bar once it is clicked.
    """

    def __init__(
        self,
        logged_in: bool = True,
        new_tab: bool = False,
        start_prompt: bool = False,
        pmi_checked: Optional[bool] = None,
        login_delay: float = 0.05,
    ):
        self.logged_in = logged_in
        self.new_tab = new_tab
        self.start_prompt = start_prompt
        self.pmi_checked = pmi_checked
        self.login_delay = login_delay
        self.new_meeting: Optional[FakeElement] = None
        self.pmi_toggle: Optional[FakeElement] = None
        self.prompt: Optional[FakeElement] = None
        self.meeting_page: Optional[FakePage] = None
        self.meetings_started = 0

    def __call__(self, page: FakePage, url: str) -> None:
        if re.search(r"signin", url):
            asyncio.get_running_loop().call_later(self.login_delay, self._complete_login, page)
        elif re.search(r"/wc/home", url) and not page.elements:
            self._render_home(page)

    def _complete_login(self, page: FakePage) -> None:
        self.logged_in = True
        page.url = ZOOM_HOME

    def _render_home(self, page: FakePage) -> None:
        if not self.logged_in:
            page.add("button", "Sign In")
            return
        self.new_meeting = page.add("button", "New Meeting", on_click=lambda: self._start_meeting(page))
        if self.pmi_checked is not None:
            page.add("button", "New Meeting Options", on_click=lambda: self._open_menu(page))

    def _open_menu(self, page: FakePage) -> None:
        if self.pmi_toggle is not None:
            return
        checked = "true" if self.pmi_checked else "false"
        self.pmi_toggle = page.add("menuitemcheckbox", "Use PMI", attrs={"aria-checked": checked})
        self.pmi_toggle.on_click = lambda: self.pmi_toggle.attrs.update({"aria-checked": "false"})

    def _start_meeting(self, page: FakePage) -> None:
        self.meetings_started += 1
        if self.new_tab:
            meeting_page = page.context.open_page(ZOOM_MEETING)
        else:
            meeting_page = page
            meeting_page.url = ZOOM_MEETING
            meeting_page.elements.clear()
        self.meeting_page = meeting_page

        frame = FakeFrame(url=ZOOM_MEETING)
        meeting_page.child_frames.append(frame)
        if self.start_prompt:
            self.prompt = frame.add("button", "Start this Meeting", on_click=lambda: self._show_controls(frame))
        else:
            self._show_controls(frame)

    def _show_controls(self, frame: FakeFrame) -> None:
        if self.prompt is not None:
            self.prompt.visible = False
        for label in ("Join Audio", "Participants", "End"):
            frame.add("button", label)


def complete_login_after(delay: float) -> Callable:
    """``on_goto`` hook: once the sign-in page loads, "log in" after ``delay``."""

    def on_goto(page: FakePage, url: str) -> None:
        if re.search(r"signin", url):
            asyncio.get_running_loop().call_later(delay, setattr, page, "url", ZOOM_HOME)

    return on_goto


@pytest.fixture
def automator_config(tmp_path):
    """Automator settings with timeouts small enough for unit tests."""
    return AutomatorSettings(
        data_dir=str(tmp_path / "profile"),
        debug_dir=str(tmp_path / "debug"),
        capture_snapshots=False,
        login_timeout_seconds=2,
        login_poll_interval_seconds=0.01,
        close_timeout_seconds=0.2,
        browser_close_timeout_seconds=0.1,
        navigation_timeout_seconds=1,
        join_attempt_timeout_seconds=2,
        meeting_start_timeout_seconds=1,
        new_page_timeout_seconds=0.2,
        ui_settle_seconds=0,
        control_probe_timeout_seconds=0.05,
        prompt_probe_timeout_seconds=0,
        retry_delay_seconds=0.01,
        leave_settle_seconds=0.01,
    )


@pytest.fixture
def fake_playwright():
    return FakePlaywright()
