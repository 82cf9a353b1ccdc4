"""
Control API.
"""
