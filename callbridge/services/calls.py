"""Call session lifecycle."""
import json
import logging
from typing import Any, Dict, Optional

from callbridge.core.exceptions import (
    ConfigError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from callbridge.services.persistence.call_sessions import CallSessionPersistenceService
from callbridge.services.voice.client import (
    MISSING_API_KEY_MESSAGE,
    ElevenLabsClient,
    VoiceProviderError,
)

logger = logging.getLogger(__name__)

CALL_INITIATED_MESSAGE = "Call initiated successfully"


def map_provider_error(error: VoiceProviderError, fallback: str = "Failed to make call") -> ProviderError:
    """Translate a raw provider failure into the error reported to API clients."""
    if error.status_code == 401:
        return ProviderError("API Key Error: Check your ELEVENLABS_API_KEY in .env file", 401)
    if error.status_code == 400:
        return ProviderError("Phone Number Error: Make sure your number is in E.164 format", 400)
    if error.status_code == 429:
        return ProviderError("Rate limit exceeded. Please try again later.", 429)
    if error.timed_out:
        return ProviderError("Request timeout. Please try again.", 408)
    detail = _detail_text(error.detail)
    if detail:
        return ProviderError(detail, 500)
    return ProviderError(error.message or fallback, 500)


def _detail_text(detail: Any) -> Optional[str]:
    if not detail:
        return None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return json.dumps(detail)


class CallService:
    """Starts, inspects and ends outbound calls.

    Session status is driven only by this service: ``start_call`` writes
    ``initiated`` and ``end_call`` writes ``completed``. Nothing polls the
    provider, so ``active`` and ``failed`` are never written.

    Concurrent ``end_call`` requests for the same id are not serialized; the
    last commit wins.
    """

    def __init__(self, client: ElevenLabsClient, persistence: CallSessionPersistenceService):
        self.client = client
        self.persistence = persistence

    async def start_call(self, phone_number: Optional[str]) -> Dict[str, Any]:
        if not phone_number:
            raise ValidationError("Phone number is required")

        if not self.client.api_key_configured:
            raise ConfigError(MISSING_API_KEY_MESSAGE)

        try:
            data = await self.client.start_outbound_call(phone_number)
        except VoiceProviderError as e:
            raise map_provider_error(e) from e

        call_id = data.get("conversation_id")
        if not call_id:
            logger.error(f"Provider response carried no conversation_id: {data}")
            raise ProviderError(data.get("message") or "Failed to make call", 500)

        logger.info(f"Call initiated, conversation id {call_id}")
        session = await self.persistence.create_session(
            call_id=call_id,
            phone_number=phone_number,
            log_message=CALL_INITIATED_MESSAGE,
        )
        return {"callId": session.call_id, "sessionId": session.id}

    async def get_status(self, call_id: str) -> Dict[str, Any]:
        session = await self.persistence.get_session_by_call_id(call_id)
        if not session:
            raise NotFoundError("Call session not found")

        return {
            "status": session.status,
            "duration": session.duration,
            "startTime": session.start_time,
            "endTime": session.end_time,
        }

    async def end_call(self, call_id: str) -> None:
        """End a call with the provider and mark its local session completed."""
        session = await self.persistence.get_session_by_call_id(call_id)
        if not session:
            raise NotFoundError("Call session not found")

        try:
            await self.client.end_call(call_id)
        except VoiceProviderError as e:
            logger.error(f"Error ending call {call_id}: {e.message}")
            raise ProviderError("Failed to end call", 500) from e

        session = await self.persistence.complete_session(session)
        logger.info(f"Call {call_id} completed after {session.duration}s")

    async def get_conversation(self, call_id: str) -> Dict[str, Any]:
        """Return the provider's conversation document without touching the session."""
        try:
            return await self.client.get_conversation(call_id)
        except VoiceProviderError as e:
            if e.status_code == 404:
                raise NotFoundError("Conversation not found") from e
            if e.status_code == 400:
                raise ProviderError(_detail_text(e.detail) or "Invalid conversation id", 400) from e
            raise map_provider_error(e, fallback="Failed to get conversation") from e
