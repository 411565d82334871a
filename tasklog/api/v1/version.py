"""
Version and metadata endpoint
"""
from fastapi import APIRouter
from tasklog.core.config import settings
from tasklog.core.constants import SERVICE_NAME

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Version information including service name, version, environment and calendar settings
    """
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
        "timezone": settings.APP_TIMEZONE,
        "rest_weekdays": list(settings.get_rest_weekdays()),
        "submission_window_days": settings.SUBMISSION_WINDOW_DAYS,
    }
