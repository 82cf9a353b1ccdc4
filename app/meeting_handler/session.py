"""
Playwright browser session manager.

Owns the single persistent Chromium profile used for Zoom automation:

- Launching a persistent context (so the Zoom login survives restarts)
- Tracking the primary page
- Closing the context with a bounded, two-tier fallback so a hung browser
  can never block later operations
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

from playwright.async_api import (
    async_playwright,
    BrowserContext,
    Page,
    Playwright,
)

from app.config import AutomatorSettings
from app.core.exceptions import SessionError
from app.core.logging import format_event, get_logger
from .diagnostics import PageInstrumentor

logger = get_logger("session")


class BrowserSessionManager:
    """
    One persistent browser context plus its primary page.

    Usage pattern:
        session = BrowserSessionManager(settings.automator, on_session_lost=state.session_lost)
        await session.ensure_session(headless=True)
        page = await session.get_page()
        await session.close_session()
    """

    def __init__(
        self,
        config: AutomatorSettings,
        on_session_lost: Optional[Callable[[], object]] = None,
        playwright_factory: Callable = async_playwright,
    ) -> None:
        self._config = config
        self._on_session_lost = on_session_lost
        self._playwright_factory = playwright_factory

        self._playwright: Optional[Playwright] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._closing: Optional[asyncio.Future] = None
        self._instrumentor = PageInstrumentor()

        self.user_data_dir = Path(config.data_dir).expanduser()
        self.user_data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def has_session(self) -> bool:
        """Return True if a browser context is currently open."""
        return self._context is not None

    @property
    def context(self) -> Optional[BrowserContext]:
        return self._context

    async def ensure_session(self, headless: bool) -> None:
        """
        Open the persistent context unless one already exists.

        Raises:
            SessionError: if Playwright or Chromium fails to start.
        """
        if self._closing is not None:
            await self._closing

        if self._context is not None:
            return

        logger.debug(format_event("ensure_session launch persistent", headless=headless))
        try:
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
            context = await self._playwright.chromium.launch_persistent_context(
                str(self.user_data_dir),
                headless=headless,
                viewport={"width": self._config.viewport_width, "height": self._config.viewport_height},
            )
        except Exception as e:
            raise SessionError(f"Failed to open browser session: {e}") from e

        context.on("page", self._instrumentor.instrument)
        for existing_page in context.pages:
            self._instrumentor.instrument(existing_page)
        context.on("close", self._on_context_close)
        self._context = context

    def _on_context_close(self, context: BrowserContext) -> None:
        # May fire after close_session already dropped the reference, or for
        # a stale context once a new one is open; only the live one counts.
        logger.debug("context close event")
        if self._context is not context:
            return
        self._context = None
        self._page = None
        self._notify_session_lost()

    def _notify_session_lost(self) -> None:
        if self._on_session_lost is None:
            return
        try:
            self._on_session_lost()
        except Exception as e:
            logger.warning(f"Session-lost callback failed: {e}")

    async def get_page(self) -> Page:
        """Return the primary page, reusing the first open tab before creating one."""
        if self._context is None:
            raise SessionError("Browser context is not initialized")

        if self._page is not None and not self._page.is_closed():
            return self._page

        pages = self._context.pages
        self._page = pages[0] if pages else await self._context.new_page()
        return self._page

    def set_page(self, page: Page) -> None:
        """Adopt ``page`` (e.g. a freshly opened meeting tab) as the primary page."""
        self._page = page

    def pages(self) -> List[Page]:
        """Open pages of the current context."""
        if self._context is None:
            return []
        return [page for page in self._context.pages if not page.is_closed()]

    async def wait_for_new_page(self, timeout: float) -> Optional[Page]:
        """Wait for the context to open another tab; None if none appears in time."""
        if self._context is None:
            return None
        try:
            page = await self._context.wait_for_event("page", timeout=timeout * 1000)
        except Exception:
            return None
        try:
            await page.wait_for_load_state("domcontentloaded")
        except Exception as e:
            logger.debug(f"New page load state wait failed: {e}")
        return page

    async def close_session(self) -> None:
        """
        Close the context. Idempotent and never raises.

        The graceful close is bounded by ``close_timeout_seconds``; past that
        the owning browser is closed (or the Playwright driver stopped, for
        persistent contexts that have no Browser object) under
        ``browser_close_timeout_seconds``. Either way the session counts as
        closed.
        """
        context = self._context
        if context is None:
            return

        self._context = None
        self._page = None
        self._notify_session_lost()

        logger.debug("close_session begin")
        close_task = asyncio.ensure_future(self._close_context_quietly(context))
        self._closing = close_task
        try:
            await asyncio.wait_for(asyncio.shield(close_task), timeout=self._config.close_timeout_seconds)
            logger.debug("close_session complete")
        except asyncio.TimeoutError:
            logger.warning("close_session timeout, attempting browser close")
            await self._force_close(context)
            close_task.cancel()
        finally:
            self._closing = None

    async def _close_context_quietly(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Context close failed: {e}")

    async def _force_close(self, context: BrowserContext) -> None:
        browser = context.browser
        if browser is not None:
            fallback = browser.close()
        elif self._playwright is not None:
            # Persistent contexts own their browser process; stopping the
            # driver is the only way to kill it.
            playwright, self._playwright = self._playwright, None
            fallback = playwright.stop()
        else:
            return

        try:
            await asyncio.wait_for(fallback, timeout=self._config.browser_close_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("fallback browser close timed out")
        except Exception as e:
            logger.warning(f"fallback browser close failed: {e}")

    async def stop(self) -> None:
        """Close the session and shut Playwright down."""
        await self.close_session()
        playwright, self._playwright = self._playwright, None
        if playwright is None:
            return
        try:
            await asyncio.wait_for(playwright.stop(), timeout=self._config.browser_close_timeout_seconds)
        except Exception as e:
            logger.warning(f"Playwright stop failed: {e}")
