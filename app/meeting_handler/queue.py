"""
Serial operation queue.

Every public automator operation is chained behind the completion of the
previous one, whether it succeeded or failed, so operations run one at a
time in call order. This chain is the only mutual-exclusion mechanism for
the shared browser session.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from app.core.logging import format_event, get_logger

logger = get_logger("queue")

T = TypeVar("T")


class OperationQueue:
    """FIFO chain of async operations."""

    def __init__(self) -> None:
        # Completion future of the most recently submitted operation
        self._tail: Optional[asyncio.Future] = None

    @property
    def busy(self) -> bool:
        return self._tail is not None and not self._tail.done()

    async def submit(self, name: str, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` after every previously submitted one has finished.

        The result (or exception) of ``operation`` is returned to this
        caller only; it never affects whether the next operation runs.
        """
        previous = self._tail
        current: asyncio.Future = asyncio.get_running_loop().create_future()
        self._tail = current
        try:
            if previous is not None and not previous.done():
                logger.debug(format_event("operation queued", operation=name))
                await asyncio.shield(previous)
            return await operation()
        finally:
            self._release(previous, current)

    @staticmethod
    def _release(previous: Optional[asyncio.Future], current: asyncio.Future) -> None:
        # A caller cancelled while still waiting must not let its successor
        # overtake the operation that is still running.
        def _complete(_=None) -> None:
            if not current.done():
                current.set_result(None)

        if previous is None or previous.done():
            _complete()
        else:
            previous.add_done_callback(_complete)
