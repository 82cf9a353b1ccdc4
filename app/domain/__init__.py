"""
Domain layer exports.
"""

from .models import (
    AutomatorState,
    StatusSnapshot,
    status_label,
)

__all__ = [
    "AutomatorState",
    "StatusSnapshot",
    "status_label",
]
