"""
Presence meeting control endpoints.
"""

from fastapi import APIRouter, Depends

from app.api.schemas import OperationResponse
from app.core.dependencies import AutomatorDep, get_request_id

router = APIRouter()


@router.post("/join", response_model=OperationResponse, tags=["Meeting"])
async def join_meeting(request_id: str = Depends(get_request_id), automator=AutomatorDep) -> OperationResponse:
    """Start the presence meeting (no-op when one is already running)."""
    await automator.join()
    return OperationResponse(request_id=request_id, message="Zoom automation meeting started")


@router.post("/leave", response_model=OperationResponse, tags=["Meeting"])
async def leave_meeting(request_id: str = Depends(get_request_id), automator=AutomatorDep) -> OperationResponse:
    """End the presence meeting by closing the browser session."""
    await automator.leave()
    return OperationResponse(request_id=request_id, message="Zoom automation meeting ended")
