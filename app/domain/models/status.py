"""
Automator state and the read-only status projection exposed to callers.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class AutomatorState(str, Enum):
    """Public state of the automation orchestrator."""
    AVAILABLE = "available"
    IN_MEETING = "in_meeting"
    AUTH_REQUIRED = "auth_required"
    STARTING = "starting"
    ERROR = "error"


_STATE_LABELS = {
    AutomatorState.STARTING: "Starting",
    AutomatorState.AUTH_REQUIRED: "Auth Required",
    AutomatorState.ERROR: "Error",
}


def status_label(state: AutomatorState, in_meeting: bool) -> str:
    """Human-readable label shown by the extension badge."""
    label = _STATE_LABELS.get(state)
    if label:
        return label
    return "In Meeting" if in_meeting else "Available"


@dataclass(frozen=True)
class StatusSnapshot:
    """
    Point-in-time view of the automator.

    ``authenticated`` is None while the login state is unknown.
    """
    state: AutomatorState
    authenticated: Optional[bool]
    in_meeting: bool
    message: str

    @property
    def label(self) -> str:
        return status_label(self.state, self.in_meeting)

    def to_log_fields(self) -> Dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        return data
