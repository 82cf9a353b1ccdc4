"""
API response schemas for the control API.

Field names are camelCase on the wire (the browser extension reads them as
is) and snake_case in Python.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    """Fields every response carries."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    request_id: str = Field(..., alias="requestId")


class HealthResponse(ApiResponse):
    """Health check response."""
    service: str
    version: str
    state: str
    in_meeting: bool = Field(..., alias="inMeeting")
    authenticated: Optional[bool] = None
    message: str


class StatusResponse(ApiResponse):
    """Automator status with its display label."""
    status: str = Field(..., description="Display label, e.g. 'In Meeting'")
    state: str
    in_meeting: bool = Field(..., alias="inMeeting")
    authenticated: Optional[bool] = None
    message: str


class OperationResponse(ApiResponse):
    """Response for login/join/leave/shutdown."""
    message: str


class ErrorResponse(BaseModel):
    """Error response with the automator state at the time of failure."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str
    request_id: str = Field(..., alias="requestId")
    automator_state: Optional[str] = Field(default=None, alias="automatorState")
    automator_message: Optional[str] = Field(default=None, alias="automatorMessage")
    authenticated: Optional[bool] = None
    in_meeting: Optional[bool] = Field(default=None, alias="inMeeting")
