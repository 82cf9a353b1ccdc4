"""
API endpoints module.
"""

from . import auth, health, meeting, system

__all__ = ["auth", "health", "meeting", "system"]
