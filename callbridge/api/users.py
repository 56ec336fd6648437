"""Registration and login endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from callbridge.core.dependencies import get_user_service
from callbridge.core.exceptions import PersistenceError
from callbridge.services.users import UserService

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    """Register request model."""
    username: Optional[str] = None
    mobile: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Login request model."""
    username: Optional[str] = None
    password: Optional[str] = None


@router.post("/api/register")
async def register(
    register_req: RegisterRequest,
    user_service: UserService = Depends(get_user_service),
):
    """Register a new user."""
    logger.info(f"[REGISTER] Registration requested for username: {register_req.username}")
    try:
        user = await user_service.register(
            register_req.username, register_req.mobile, register_req.password
        )
    except SQLAlchemyError as e:
        logger.error(f"[REGISTER] Database error: {e}", exc_info=True)
        raise PersistenceError("Registration failed.") from e

    return {"success": True, "user": user}


@router.post("/api/login")
async def login(
    login_req: LoginRequest,
    user_service: UserService = Depends(get_user_service),
):
    """Login endpoint."""
    try:
        user = await user_service.login(login_req.username, login_req.password)
    except SQLAlchemyError as e:
        logger.error(f"[LOGIN] Database error: {e}", exc_info=True)
        raise PersistenceError("Login failed.") from e

    return {"success": True, "user": user}
