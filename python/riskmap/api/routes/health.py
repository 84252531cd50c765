"""Health check endpoints."""

from fastapi import APIRouter

from riskmap.responses import success_response

router = APIRouter()

SERVICE_MESSAGE = "API Services"


@router.get("/health")
async def health_check() -> dict:
    """Liveness check endpoint.

    Returns 200 if the process is running.
    Does not check the database or any upstream provider.
    """
    return success_response({"status": "ok", "message": SERVICE_MESSAGE})
