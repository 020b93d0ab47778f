"""Health check endpoint with database and session store connectivity."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from adminpanel.core import check_db_connection, check_redis_connection, settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    redis: str


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        status.HTTP_200_OK: {"description": "Service is healthy"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Service is unhealthy"},
    },
)
async def health_check(response: Response) -> HealthResponse:
    """Returns 503 if either the database or Redis is unavailable."""
    db_healthy = await check_db_connection()
    redis_healthy = await check_redis_connection()
    healthy = db_healthy and redis_healthy

    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.app_version,
        database="connected" if db_healthy else "disconnected",
        redis="connected" if redis_healthy else "disconnected",
    )
