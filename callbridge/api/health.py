"""Health check endpoint."""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from callbridge.core.config import Settings
from callbridge.core.dependencies import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/health")
async def health_check(request: Request, app_settings: Settings = Depends(get_settings)):
    """Health check endpoint."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {
        "status": "ok",
        "message": f"{app_settings.app_name} is running",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "apiKeyConfigured": app_settings.api_key_configured,
    }
