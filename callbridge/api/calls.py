"""Outbound call endpoints."""
import logging
from datetime import timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from callbridge.core.dependencies import get_call_service
from callbridge.core.exceptions import PersistenceError
from callbridge.services.calls import CALL_INITIATED_MESSAGE, CallService

router = APIRouter()
logger = logging.getLogger(__name__)


class MakeCallRequest(BaseModel):
    """Make-call request model."""
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    model_config = ConfigDict(populate_by_name=True)


def _isoformat(value):
    # Stored times are naive UTC
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")


@router.post("/api/make-call")
async def make_call(
    request: Request,
    call_req: MakeCallRequest,
    call_service: CallService = Depends(get_call_service),
):
    """Start an outbound call and record its session."""
    logger.info(
        f"[MAKE CALL] Request received - phone number: {call_req.phone_number}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        result = await call_service.start_call(call_req.phone_number)
    except SQLAlchemyError as e:
        logger.error(f"[MAKE CALL] Database error: {e}", exc_info=True)
        raise PersistenceError("Failed to make call") from e

    logger.info(f"[MAKE CALL] Call initiated - callId: {result['callId']}")
    return {
        "success": True,
        "message": CALL_INITIATED_MESSAGE,
        "callId": result["callId"],
        "sessionId": result["sessionId"],
    }


@router.get("/api/call-status/{call_id}")
async def get_call_status(
    call_id: str,
    call_service: CallService = Depends(get_call_service),
):
    """Get the stored status of a call session."""
    try:
        status = await call_service.get_status(call_id)
    except SQLAlchemyError as e:
        logger.error(f"[CALL STATUS] Error getting call status: {e}", exc_info=True)
        raise PersistenceError("Failed to get call status") from e

    return {
        "success": True,
        "callStatus": status["status"],
        "duration": status["duration"],
        "startTime": _isoformat(status["startTime"]),
        "endTime": _isoformat(status["endTime"]),
    }


@router.post("/api/end-call/{call_id}")
async def end_call(
    call_id: str,
    call_service: CallService = Depends(get_call_service),
):
    """End a call manually."""
    logger.info(f"[END CALL] Request received - callId: {call_id}")
    try:
        await call_service.end_call(call_id)
    except SQLAlchemyError as e:
        logger.error(f"[END CALL] Error ending call: {e}", exc_info=True)
        raise PersistenceError("Failed to end call") from e

    return {"success": True, "message": "Call ended successfully"}


@router.get("/api/conversations/{call_id}")
async def get_conversation(
    call_id: str,
    call_service: CallService = Depends(get_call_service),
):
    """Fetch the provider's record of a conversation."""
    logger.debug(f"[CONVERSATION] Checking provider status for conversation: {call_id}")
    conversation = await call_service.get_conversation(call_id)
    return {"success": True, "conversation": conversation}
