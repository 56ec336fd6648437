"""FastAPI dependencies."""
from typing import Optional

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from callbridge.core.config import Settings, settings
from callbridge.db.database import get_db
from callbridge.services.calls import CallService
from callbridge.services.persistence.call_sessions import CallSessionPersistenceService
from callbridge.services.persistence.users import UserPersistenceService
from callbridge.services.users import UserService
from callbridge.services.voice.client import ElevenLabsClient


def get_settings() -> Settings:
    """Get the process-wide settings."""
    return settings


def get_voice_client(
    request: Request,
    app_settings: Settings = Depends(get_settings),
) -> ElevenLabsClient:
    """Get a voice client bound to the shared HTTP connection pool, if one is open."""
    http_client: Optional[httpx.AsyncClient] = getattr(request.app.state, "http_client", None)
    return ElevenLabsClient(app_settings, http_client=http_client)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserPersistenceService(db))


def get_call_service(
    db: AsyncSession = Depends(get_db),
    client: ElevenLabsClient = Depends(get_voice_client),
) -> CallService:
    return CallService(client, CallSessionPersistenceService(db))
