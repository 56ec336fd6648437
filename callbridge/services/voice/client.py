"""ElevenLabs conversational-voice client."""
import logging
from typing import Any, Dict, Optional

import httpx

from callbridge.core.config import Settings
from callbridge.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    "ElevenLabs API key not configured. Please add ELEVENLABS_API_KEY to your .env file"
)


class VoiceProviderError(Exception):
    """Raw failure reported by the voice provider or the transport."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[Any] = None,
        timed_out: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.timed_out = timed_out


class ElevenLabsClient:
    """Thin wrapper over the ElevenLabs Twilio outbound-call API.

    Pass ``http_client`` to share a connection pool (the application does this
    from its lifespan); otherwise every request opens a short-lived client.
    Nothing is retried.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._http_client = http_client

    @property
    def api_key_configured(self) -> bool:
        return self._settings.api_key_configured

    def _headers(self) -> Dict[str, str]:
        if not self._settings.elevenlabs_api_key:
            raise ConfigError(MISSING_API_KEY_MESSAGE)
        return {
            "xi-api-key": self._settings.elevenlabs_api_key,
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self._settings.elevenlabs_base_url.rstrip('/')}{path}"

    async def start_outbound_call(self, to_number: str) -> Dict[str, Any]:
        """Ask the provider to dial ``to_number`` with the configured agent."""
        payload = {
            "agent_id": self._settings.elevenlabs_agent_id,
            "agent_phone_number_id": self._settings.elevenlabs_phone_number_id,
            "to_number": to_number,
        }
        logger.info(
            f"Starting outbound call to {to_number} "
            f"(agent: {self._settings.elevenlabs_agent_id}, "
            f"phone number: {self._settings.elevenlabs_phone_number_id})"
        )
        return await self._request(
            "POST",
            "/v1/convai/twilio/outbound-call",
            json=payload,
            timeout=self._settings.call_start_timeout,
        )

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        """Fetch the provider's view of a conversation."""
        return await self._request(
            "GET",
            f"/v1/convai/conversations/{conversation_id}",
            timeout=self._settings.provider_timeout,
        )

    async def end_call(self, conversation_id: str) -> Dict[str, Any]:
        """Ask the provider to hang up a conversation."""
        return await self._request(
            "POST",
            f"/v1/convai/twilio/call/{conversation_id}/end",
            json={},
            timeout=self._settings.provider_timeout,
        )

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        headers = self._headers()
        url = self._url(path)

        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method, url, json=json, headers=headers, timeout=timeout
                )
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"Provider request timed out: {method} {path}")
            raise VoiceProviderError(str(e) or "Request timed out", timed_out=True) from e
        except httpx.HTTPError as e:
            logger.error(f"Provider request failed: {method} {path}: {e}")
            raise VoiceProviderError(str(e) or e.__class__.__name__) from e

        if response.status_code >= 400:
            error_data = _json_or_none(response)
            logger.error(
                f"Provider returned {response.status_code} for {method} {path}: {error_data}"
            )
            detail = error_data.get("detail") if isinstance(error_data, dict) else None
            raise VoiceProviderError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        data = _json_or_none(response)
        return data if isinstance(data, dict) else {}


def _json_or_none(response: httpx.Response) -> Optional[Any]:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
