"""
Configuration module for the Zoom presence automator.
"""

from .settings import (
    Settings,
    settings,
    AutomatorSettings,
    ServerSettings,
)

__all__ = [
    "Settings",
    "settings",
    "AutomatorSettings",
    "ServerSettings",
]
