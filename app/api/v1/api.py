"""API v1 router configuration.

This module sets up the main API router and includes the sub-routers for the
email callable and the scheduled tasks.
"""

from fastapi import APIRouter

from app.api.v1.email import router as email_router
from app.api.v1.tasks import router as tasks_router
from app.core.config import settings
from app.core.logging import logger

api_router = APIRouter()

# Include routers
api_router.include_router(email_router, prefix="/email", tags=["email"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["tasks"])


@api_router.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Health status information.
    """
    logger.info("health_check_called")
    return {"status": "healthy", "version": settings.VERSION}
