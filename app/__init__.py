"""
Zoom presence automator.
"""
