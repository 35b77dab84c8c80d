"""Health check endpoint."""

from datetime import datetime, timezone
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "obatech-upscaler",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the orchestrator is wired; reports whether a key is set."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return {
        "ready": orchestrator is not None,
        "credential_configured": bool(orchestrator and orchestrator.api_key),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
