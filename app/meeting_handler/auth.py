"""
Authentication detection for the persistent Zoom profile.

Purely URL/DOM inspection. Ambiguous states are reported as "not
authenticated": a false negative only routes the caller to login, while a
false positive would send the join flow into a sign-in page.
"""

from __future__ import annotations

from playwright.async_api import Page

from app.core.logging import get_logger
from .zoom_selectors import AUTH_ROUTE, get_selectors_for

logger = get_logger("auth")


async def is_authenticated(page: Page) -> bool:
    """Return True if the current page looks like a logged-in Zoom web client."""
    if AUTH_ROUTE.search(page.url):
        return False

    for strategy in get_selectors_for("sign_in_controls"):
        try:
            if await strategy.build(page).count() > 0:
                return False
        except Exception as e:
            logger.debug(f"Sign-in probe failed, treating as logged out: {e}")
            return False

    return True


async def ensure_authenticated(page: Page, home_url: str, state, timeout: float = 20.0) -> bool:
    """
    Navigate home and record whether the profile is logged in.

    Args:
        page: Primary session page
        home_url: Zoom web client home URL
        state: AutomatorStateMachine receiving the result
        timeout: Navigation timeout in seconds

    Returns:
        The detected authentication flag.
    """
    await page.goto(home_url, wait_until="domcontentloaded", timeout=timeout * 1000)
    authed = await is_authenticated(page)
    state.transition(authenticated=authed)
    return authed
