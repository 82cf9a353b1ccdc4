"""
Domain models module.
"""

from .status import (
    AutomatorState,
    StatusSnapshot,
    status_label,
)

__all__ = [
    "AutomatorState",
    "StatusSnapshot",
    "status_label",
]
