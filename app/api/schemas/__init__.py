"""
API schemas module.
"""

from .automator import (
    ApiResponse,
    HealthResponse,
    StatusResponse,
    OperationResponse,
    ErrorResponse,
)

__all__ = [
    "ApiResponse",
    "HealthResponse",
    "StatusResponse",
    "OperationResponse",
    "ErrorResponse",
]
