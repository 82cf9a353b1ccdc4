"""
Zoom web-client automation.
"""

from .automator import ZoomAutomator
from .deadline import Deadline
from .meeting_start import MeetingStartProcedure, SignalEvaluation
from .queue import OperationQueue
from .session import BrowserSessionManager
from .state import AutomatorStateMachine

__all__ = [
    "ZoomAutomator",
    "Deadline",
    "MeetingStartProcedure",
    "SignalEvaluation",
    "OperationQueue",
    "BrowserSessionManager",
    "AutomatorStateMachine",
]
