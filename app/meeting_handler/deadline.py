"""
Deadline scopes for bounded automation steps.

A join attempt runs under one parent deadline; each step takes a child
deadline that never outlives its parent, so a slow early step shortens the
budget of later ones instead of every step re-deriving its own timer.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from app.core.exceptions import AutomationTimeoutError

T = TypeVar("T")


class Deadline:
    """A point in (event-loop) time after which work must stop."""

    def __init__(self, seconds: Optional[float], parent: Optional["Deadline"] = None):
        loop = asyncio.get_running_loop()
        expires_at = None if seconds is None else loop.time() + max(seconds, 0.0)
        if parent is not None and parent.expires_at is not None:
            expires_at = parent.expires_at if expires_at is None else min(expires_at, parent.expires_at)
        self.expires_at = expires_at

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def child(self, seconds: Optional[float]) -> "Deadline":
        """Deadline for a nested step: the earlier of ``seconds`` and this one."""
        return Deadline(seconds, parent=self)

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(self.expires_at - asyncio.get_running_loop().time(), 0.0)

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    async def run(self, awaitable: Awaitable[T], message: str) -> T:
        """
        Await ``awaitable`` within this deadline.

        Raises:
            AutomationTimeoutError: if the deadline passes first (the inner
                work is cancelled).
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise AutomationTimeoutError(message)
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise AutomationTimeoutError(message) from exc
