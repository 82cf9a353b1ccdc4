"""
Interactive Zoom login endpoint.
"""

from fastapi import APIRouter, Depends

from app.api.schemas import OperationResponse
from app.core.dependencies import AutomatorDep, get_request_id
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger("api.auth")


@router.post("/login", response_model=OperationResponse, tags=["Authentication"])
async def login(request_id: str = Depends(get_request_id), automator=AutomatorDep) -> OperationResponse:
    """
    Open a visible browser on the Zoom sign-in page and wait until the user
    has logged in (MFA included). The session is saved in the persistent
    profile, so this is needed once.
    """
    await automator.login()
    logger.info("Zoom login completed")
    return OperationResponse(
        request_id=request_id,
        message="Zoom login completed and saved in persistent profile",
    )
