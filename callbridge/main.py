"""Main FastAPI application."""
import logging
import os
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from callbridge.api import calls, health, users
from callbridge.core.config import settings
from callbridge.core.exceptions import CallBridgeError
from callbridge.core.logging import setup_logging
from callbridge.db.database import dispose_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings)
    await init_db()
    app.state.http_client = httpx.AsyncClient()
    logger.info(f"{settings.app_name} running on http://{settings.host}:{settings.port}")
    logger.info(f"API key configured: {'Yes' if settings.api_key_configured else 'No'}")
    if not settings.api_key_configured:
        logger.warning(
            "ELEVENLABS_API_KEY not found. Create a .env file with: "
            "ELEVENLABS_API_KEY=your_api_key_here"
        )
    yield
    # Shutdown
    await app.state.http_client.aclose()
    app.state.http_client = None
    await dispose_db()


app = FastAPI(
    title="CallBridge",
    description="User accounts and outbound AI voice calls",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(CallBridgeError)
async def callbridge_error_handler(request: Request, exc: CallBridgeError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body."},
    )


# Include routers (must be before static file mounting to take precedence)
app.include_router(health.router, tags=["health"])
app.include_router(users.router, tags=["users"])
app.include_router(calls.router, tags=["calls"])

# Mount static files (for frontend)
static_dir = os.path.join(os.path.dirname(__file__), "static")
if os.path.exists(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.get("/")
async def root():
    """Serve frontend index.html."""
    index_path = os.path.join(static_dir, "index.html")
    if os.path.exists(index_path):
        return FileResponse(index_path)
    return {
        "message": "CallBridge API",
        "version": "0.1.0",
        "frontend": "No frontend found. Place index.html in callbridge/static.",
    }


def run() -> None:
    """Run the API server."""
    uvicorn.run(
        "callbridge.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
