"""
UI navigation primitives shared by every automation step.

All lookups poll an ordered list of candidates and return "not found"
instead of raising; click helpers report whether a click happened.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

from playwright.async_api import Frame, Locator, Page

from app.core.logging import format_event, get_logger
from .locators import LocatorStrategy, Scope, describe, resolve
from .zoom_selectors import FramePrompt

logger = get_logger("navigation")

POLL_INTERVAL = 0.15
FRAME_POLL_INTERVAL = 0.12


@dataclass
class FrameMatch:
    """A visible element found inside one of the page's frames."""
    frame: Frame
    locator: Locator
    kind: str


async def is_present_and_visible(locator: Locator) -> bool:
    """True if the locator matches a visible element; probe errors count as no."""
    try:
        if await locator.count() == 0:
            return False
        return await locator.is_visible()
    except Exception:
        return False


async def find_first_visible(
    scope: Scope,
    strategies: Sequence[LocatorStrategy],
    timeout: float = 2.5,
) -> Optional[Tuple[LocatorStrategy, Locator]]:
    """
    Poll ``strategies`` until one yields a visible element.

    The first match in list order wins, not DOM order. Each round tries
    every strategy once; at least one round always runs.

    Returns:
        ``(strategy, locator)`` or None on timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        for strategy, locator in resolve(scope, strategies):
            if await is_present_and_visible(locator):
                return strategy, locator
        if loop.time() >= deadline:
            return None
        await asyncio.sleep(POLL_INTERVAL)


async def find_visible_text_across_frames(
    page: Page,
    patterns: Sequence[Pattern[str]],
    timeout: float = 0.5,
) -> Optional[FrameMatch]:
    """Search every frame of ``page`` for visible text matching any pattern."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        for frame in page.frames:
            for text in patterns:
                candidate = frame.get_by_text(text).first
                if await is_present_and_visible(candidate):
                    return FrameMatch(frame, candidate, "text")
        if loop.time() >= deadline:
            return None
        await asyncio.sleep(FRAME_POLL_INTERVAL)


def _actionable_candidates(frame: Frame, text: Pattern[str]):
    return [
        (frame.get_by_role("button", name=text).first, "button-role"),
        (frame.get_by_role("link", name=text).first, "link-role"),
        (frame.locator('button, [role="button"], a').filter(has_text=text).first, "css-actionable"),
        (frame.get_by_text(text).first, "text"),
    ]


async def find_actionable_across_frames(
    page: Page,
    text: Pattern[str],
    timeout: float = 0.7,
) -> Optional[FrameMatch]:
    """
    Find a clickable element labelled ``text`` in any frame.

    Zoom renders its meeting controls inside nested iframes, so the main
    document alone is not enough.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        for frame in page.frames:
            for locator, kind in _actionable_candidates(frame, text):
                if await is_present_and_visible(locator):
                    return FrameMatch(frame, locator, kind)
        if loop.time() >= deadline:
            return None
        await asyncio.sleep(FRAME_POLL_INTERVAL)


async def find_across_frames(
    page: Page,
    patterns: Sequence[Pattern[str]],
    timeout: float = 0.5,
    actionable: bool = False,
) -> Optional[FrameMatch]:
    """Cross-frame search; ``actionable`` restricts matches to clickable elements."""
    if not actionable:
        return await find_visible_text_across_frames(page, patterns, timeout)
    per_pattern = timeout / max(len(patterns), 1)
    for text in patterns:
        match = await find_actionable_across_frames(page, text, per_pattern)
        if match:
            return match
    return None


async def safe_click(locator: Locator, timeout: float = 2.0) -> bool:
    """Click, treating a stale or detached element as "did not click"."""
    try:
        await locator.click(timeout=timeout * 1000)
        return True
    except Exception as e:
        logger.debug(f"Click failed: {e}")
        return False


async def try_click(
    page: Page,
    strategies: Sequence[LocatorStrategy],
    timeout: float = 2.5,
) -> bool:
    """Find the first visible candidate and click it."""
    found = await find_first_visible(page, strategies, timeout)
    if not found:
        return False
    return await safe_click(found[1])


async def try_click_labelled(
    page: Page,
    strategies: Sequence[LocatorStrategy],
    per_entry_timeout: float = 0.5,
) -> bool:
    """
    Click the first visible prompt, searching each entry separately.

    Returns:
        True if one prompt was clicked.
    """
    for strategy in strategies:
        found = await find_first_visible(page, [strategy], per_entry_timeout)
        if not found:
            continue
        if not await safe_click(found[1]):
            continue
        logger.debug(format_event("click prompt", label=describe(strategy), url=page.url))
        await asyncio.sleep(0.25)
        return True
    return False


async def try_click_across_frames(
    page: Page,
    prompts: Sequence[FramePrompt],
    per_entry_timeout: float = 0.8,
) -> bool:
    """Click the first actionable cross-frame prompt that is visible."""
    for prompt in prompts:
        match = await find_across_frames(page, [prompt.text], per_entry_timeout, actionable=True)
        if not match:
            continue
        if not await safe_click(match.locator, timeout=2.5):
            continue
        logger.debug(
            format_event(
                "click actionable prompt across frames",
                label=prompt.label,
                url=page.url,
                frame_url=match.frame.url,
                kind=match.kind,
            )
        )
        await asyncio.sleep(0.3)
        return True
    return False
