"""
FastAPI application initialization for the Zoom Automator control API.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.logging import setup_logging
from app.api.errors import register_exception_handlers
from app.api.middleware import request_context_middleware
from app.api.router import api_router

# Setup logging
setup_logging()

# Create FastAPI application
app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description="Local control API that starts and ends a Zoom presence meeting on demand",
    docs_url="/docs",
    redoc_url=None,
    openapi_url="/openapi.json",
)

# CORS middleware (the browser extension calls from its own origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_context_middleware)

register_exception_handlers(app)

# Include routers
app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    """
    Application startup event.
    Create the automator; the browser itself is only opened on demand.
    """
    from app.meeting_handler import ZoomAutomator
    from app.core.dependencies import set_automator_instance
    from app.core.logging import get_logger

    logger = get_logger("startup")
    logger.info("Starting Zoom Automator API...")

    automator = ZoomAutomator(settings.automator)
    set_automator_instance(automator)

    logger.info(f"Zoom Automator API listening on http://{settings.server.host}:{settings.server.port}")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Application shutdown event.
    Close the browser session and stop Playwright.
    """
    from app.core.dependencies import get_automator_instance, set_automator_instance
    from app.core.logging import get_logger

    logger = get_logger("shutdown")
    logger.info("Shutting down Zoom Automator API...")

    automator = get_automator_instance()
    if automator is not None:
        try:
            await automator.dispose()
        except Exception as e:
            logger.warning(f"Automator dispose failed: {e}")
        set_automator_instance(None)

    logger.info("Zoom Automator API shutdown complete")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
