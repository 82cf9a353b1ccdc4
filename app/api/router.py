"""
API router aggregation.
"""

from fastapi import APIRouter
from app.api.endpoints import auth, health, meeting, system

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(meeting.router, prefix="/meeting", tags=["Meeting"])
api_router.include_router(system.router, tags=["System"])

__all__ = ["api_router"]
