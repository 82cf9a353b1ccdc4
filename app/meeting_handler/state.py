"""
Automator state machine.

All state changes, including the ones triggered by browser close events,
go through ``transition`` so callers never observe a half-updated status.
"""

from __future__ import annotations

from typing import Optional

from app.core.logging import format_event, get_logger
from app.domain.models import AutomatorState, StatusSnapshot

logger = get_logger("state")

_UNSET = object()


class AutomatorStateMachine:
    """Owns ``state``, ``authenticated``, ``in_meeting`` and the last message."""

    def __init__(self) -> None:
        self._state = AutomatorState.AVAILABLE
        self._authenticated: Optional[bool] = None
        self._in_meeting = False
        self._message = "Idle"

    @property
    def state(self) -> AutomatorState:
        return self._state

    @property
    def authenticated(self) -> Optional[bool]:
        return self._authenticated

    @property
    def in_meeting(self) -> bool:
        return self._in_meeting

    @property
    def message(self) -> str:
        return self._message

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(
            state=self._state,
            authenticated=self._authenticated,
            in_meeting=self._in_meeting,
            message=self._message,
        )

    def log_fields(self) -> dict:
        """Fields appended to every structured automator log event."""
        return {
            "state": self._state.value,
            "in_meeting": self._in_meeting,
            "authenticated": self._authenticated,
        }

    def transition(
        self,
        state: Optional[AutomatorState] = None,
        message: Optional[str] = None,
        authenticated=_UNSET,
        in_meeting: Optional[bool] = None,
    ) -> StatusSnapshot:
        """
        Apply a change atomically and return the resulting snapshot.

        ``authenticated`` accepts None ("unknown"), so it is only touched
        when passed explicitly.
        """
        previous = self._state
        if state is not None:
            self._state = state
        if message is not None:
            self._message = message
        if authenticated is not _UNSET:
            self._authenticated = authenticated
        if in_meeting is not None:
            self._in_meeting = in_meeting
        if self._state is not previous:
            logger.debug(format_event("state transition", previous=previous.value, current=self._state.value))
        return self.snapshot()

    def baseline_state(self) -> AutomatorState:
        if self._authenticated is False:
            return AutomatorState.AUTH_REQUIRED
        return AutomatorState.AVAILABLE

    def reset_to_baseline(self, message: str) -> StatusSnapshot:
        return self.transition(state=self.baseline_state(), message=message, in_meeting=False)

    def session_lost(self) -> StatusSnapshot:
        """
        React to the browser context going away, for any reason.

        ``in_meeting`` always drops; a state that only makes sense with a
        live session falls back to the baseline.
        """
        if self._state is AutomatorState.IN_MEETING:
            return self.transition(
                state=self.baseline_state(),
                message="Browser session closed",
                in_meeting=False,
            )
        return self.transition(in_meeting=False)
