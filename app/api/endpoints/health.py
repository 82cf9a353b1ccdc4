"""
Health check and status endpoints.
"""

from fastapi import APIRouter, Depends

from app.api.schemas import HealthResponse, StatusResponse
from app.config import settings
from app.core.dependencies import AutomatorDep, get_request_id

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request_id: str = Depends(get_request_id), automator=AutomatorDep) -> HealthResponse:
    """
    Health check endpoint.

    Returns:
        Service identity plus the current automator snapshot
    """
    status = automator.get_status()
    return HealthResponse(
        request_id=request_id,
        service=settings.service_id,
        version=settings.version,
        state=status.state.value,
        in_meeting=status.in_meeting,
        authenticated=status.authenticated,
        message=status.message,
    )


@router.get("/status", response_model=StatusResponse, tags=["Status"])
async def get_status(request_id: str = Depends(get_request_id), automator=AutomatorDep) -> StatusResponse:
    """
    Get the automator status with its display label.

    Never waits on a queued operation.
    """
    status = automator.get_status()
    return StatusResponse(
        request_id=request_id,
        status=status.label,
        state=status.state.value,
        in_meeting=status.in_meeting,
        authenticated=status.authenticated,
        message=status.message,
    )
