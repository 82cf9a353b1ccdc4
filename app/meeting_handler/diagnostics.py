"""
Diagnostics for stuck or failed automation runs.

Nothing here affects correctness: every helper degrades to a default value
or a log line instead of raising.
"""

from __future__ import annotations

import re
import weakref
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from playwright.async_api import Page

from app.core.logging import format_event, get_logger

logger = get_logger("diagnostics")

_VISIBLE_TEXTS_JS = """
(elements, limit) => elements
    .map((el) => (el.textContent || '').trim())
    .filter((text) => text.length > 0)
    .slice(0, limit)
"""

# Known Zoom web-client noise that says nothing about the automation state
_SUPPRESSED_CONSOLE = [
    re.compile(r"Failed to execute 'postMessage' on 'DOMWindow'", re.IGNORECASE),
    re.compile(r"Amplitude Logger \[Warn\]: Network error occurred, event batch rejected", re.IGNORECASE),
    re.compile(r"The @zoom/hybrid-jssdk only supports UnifyWebView", re.IGNORECASE),
    re.compile(r"Collector url is required", re.IGNORECASE),
    re.compile(r"No 'Access-Control-Allow-Origin' header is present", re.IGNORECASE),
]


class SnapshotRecorder:
    """Writes full-page screenshots named ``<timestamp>-<counter>-<stage>.png``."""

    def __init__(self, debug_dir: str, enabled: bool = True):
        self.debug_dir = Path(debug_dir)
        self.enabled = enabled
        self._counter = 0

    async def capture(self, page: Page, stage: str) -> None:
        """
        Save a debug screenshot for a specific stage.

        Args:
            page: Playwright page to capture
            stage: Descriptive name for this stage (e.g., "meeting-start-timeout")
        """
        if not self.enabled:
            return

        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            self._counter += 1
            stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
            path = self.debug_dir / f"{stamp}-{self._counter}-{stage}.png"
            await page.screenshot(path=str(path), full_page=True, timeout=4000)
            logger.debug(format_event("captured page snapshot", stage=stage, path=str(path), url=page.url))
        except Exception as e:
            logger.warning(format_event("capture page snapshot failed", stage=stage, message=str(e)))


async def _visible_texts(page: Page, selector: str, limit: int) -> list:
    try:
        return await page.locator(selector).evaluate_all(_VISIBLE_TEXTS_JS, limit)
    except Exception:
        return []


async def page_diagnostics(page: Page, page_count: int = 0) -> Dict[str, Any]:
    """Summarize what the page currently shows: URL, title, buttons, headings."""
    try:
        title = await page.title()
    except Exception:
        title = "unknown"

    return {
        "url": page.url,
        "title": title,
        "visible_buttons": await _visible_texts(page, "button:visible", 8),
        "visible_headings": await _visible_texts(page, "h1:visible, h2:visible, h3:visible", 5),
        "page_count": page_count,
    }


def should_suppress_console(message_type: str, text: str) -> bool:
    if message_type == "log":
        return True
    return any(noise.search(text) for noise in _SUPPRESSED_CONSOLE)


class PageInstrumentor:
    """Attaches logging listeners to each page exactly once."""

    def __init__(self) -> None:
        self._instrumented: "weakref.WeakSet[Page]" = weakref.WeakSet()

    def instrument(self, page: Page) -> None:
        if page in self._instrumented:
            return
        self._instrumented.add(page)

        def on_console(msg) -> None:
            text = msg.text
            if not text or should_suppress_console(msg.type, text):
                return
            logger.debug(format_event("playwright console", url=page.url, console_type=msg.type, text=text[:500]))

        def on_page_error(error) -> None:
            logger.warning(format_event("playwright pageerror", url=page.url, message=str(error)))

        def on_request_failed(request) -> None:
            logger.debug(
                format_event(
                    "playwright requestfailed",
                    url=page.url,
                    request_url=request.url,
                    method=request.method,
                    failure=request.failure,
                )
            )

        def on_frame_navigated(frame) -> None:
            if frame == page.main_frame:
                logger.debug(format_event("playwright mainframe navigated", url=frame.url))

        page.on("console", on_console)
        page.on("pageerror", on_page_error)
        page.on("requestfailed", on_request_failed)
        page.on("framenavigated", on_frame_navigated)
