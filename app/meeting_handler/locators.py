"""
Typed locator strategies.

The Zoom web client has no stable DOM contract, so every element is described
as an ordered list of strategies (role, text, CSS) tried from most to least
reliable. Each strategy is a plain value that can be listed, logged, and
tested on its own; ``resolve`` is the one place they become Playwright
locators.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Pattern, Tuple, Union

from playwright.async_api import Frame, Locator, Page

Scope = Union[Page, Frame]


def pattern(text: str, flags: int = re.IGNORECASE) -> Pattern[str]:
    """Compile a case-insensitive pattern."""
    return re.compile(text, flags)


@dataclass(frozen=True)
class RoleMatch:
    """Match by ARIA role and accessible name."""
    role: str
    name: Pattern[str]
    exact: bool = False
    label: str = ""

    def build(self, scope: Scope) -> Locator:
        return scope.get_by_role(self.role, name=self.name, exact=self.exact).first


@dataclass(frozen=True)
class TextMatch:
    """Match by visible text."""
    text: Pattern[str]
    label: str = ""

    def build(self, scope: Scope) -> Locator:
        return scope.get_by_text(self.text).first


@dataclass(frozen=True)
class CssMatch:
    """Match by CSS selector, optionally narrowed to elements containing text."""
    selector: str
    has_text: Optional[Pattern[str]] = None
    label: str = ""

    def build(self, scope: Scope) -> Locator:
        locator = scope.locator(self.selector)
        if self.has_text is not None:
            locator = locator.filter(has_text=self.has_text)
        return locator.first


LocatorStrategy = Union[RoleMatch, TextMatch, CssMatch]


def describe(strategy: LocatorStrategy) -> str:
    """Short name for logs."""
    if strategy.label:
        return strategy.label
    if isinstance(strategy, RoleMatch):
        return f"role:{strategy.role}:{strategy.name.pattern}"
    if isinstance(strategy, TextMatch):
        return f"text:{strategy.text.pattern}"
    return f"css:{strategy.selector}"


def resolve(scope: Scope, strategies: Iterable[LocatorStrategy]) -> Iterator[Tuple[LocatorStrategy, Locator]]:
    """Yield ``(strategy, locator)`` pairs in priority order."""
    for strategy in strategies:
        yield strategy, strategy.build(scope)
