"""
Process control endpoint.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api.schemas import OperationResponse
from app.core.dependencies import AutomatorDep, get_process_exit, get_request_id
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger("api.system")


@router.post("/shutdown", response_model=OperationResponse, tags=["System"])
async def shutdown(
    background_tasks: BackgroundTasks,
    request_id: str = Depends(get_request_id),
    automator=AutomatorDep,
    process_exit=Depends(get_process_exit),
) -> OperationResponse:
    """
    Dispose the browser session and stop the server.

    The exit is scheduled as a background task so the response is sent first.
    """
    await automator.dispose()
    logger.info("Shutdown requested")
    background_tasks.add_task(process_exit)
    return OperationResponse(request_id=request_id, message="Shutting down")
