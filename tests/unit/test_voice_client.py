"""Unit tests for the ElevenLabs voice client."""
import json

import httpx
import pytest

from callbridge.core.exceptions import ConfigError
from callbridge.services.voice.client import ElevenLabsClient, VoiceProviderError

OUTBOUND_PATH = "/v1/convai/twilio/outbound-call"


class TestStartOutboundCall:
    @pytest.mark.asyncio
    async def test_sends_agent_and_credential(self, voice_client, fake_provider):
        fake_provider.reply(
            "POST", OUTBOUND_PATH, httpx.Response(200, json={"conversation_id": "abc123"})
        )

        data = await voice_client.start_outbound_call("+15551234567")

        assert data == {"conversation_id": "abc123"}
        assert len(fake_provider.requests) == 1
        request = fake_provider.requests[0]
        assert request.headers["xi-api-key"] == "test-key"
        assert json.loads(request.content) == {
            "agent_id": "agent_test",
            "agent_phone_number_id": "phnum_test",
            "to_number": "+15551234567",
        }

    @pytest.mark.asyncio
    async def test_uses_call_start_timeout(self, voice_client, fake_provider):
        fake_provider.reply(
            "POST", OUTBOUND_PATH, httpx.Response(200, json={"conversation_id": "abc123"})
        )

        await voice_client.start_outbound_call("+15551234567")

        assert fake_provider.requests[0].extensions["timeout"]["read"] == 30.0

    @pytest.mark.asyncio
    async def test_error_status_carries_detail(self, voice_client, fake_provider):
        fake_provider.reply(
            "POST",
            OUTBOUND_PATH,
            httpx.Response(422, json={"detail": "Agent has no phone number"}),
        )

        with pytest.raises(VoiceProviderError) as exc_info:
            await voice_client.start_outbound_call("+15551234567")

        assert exc_info.value.status_code == 422
        assert exc_info.value.detail == "Agent has no phone number"
        assert exc_info.value.timed_out is False

    @pytest.mark.asyncio
    async def test_error_status_without_body(self, voice_client, fake_provider):
        fake_provider.reply("POST", OUTBOUND_PATH, httpx.Response(503))

        with pytest.raises(VoiceProviderError) as exc_info:
            await voice_client.start_outbound_call("+15551234567")

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail is None

    @pytest.mark.asyncio
    async def test_timeout(self, voice_client, fake_provider):
        fake_provider.reply("POST", OUTBOUND_PATH, httpx.ReadTimeout("timed out"))

        with pytest.raises(VoiceProviderError) as exc_info:
            await voice_client.start_outbound_call("+15551234567")

        assert exc_info.value.timed_out is True
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_connection_error(self, voice_client, fake_provider):
        fake_provider.reply("POST", OUTBOUND_PATH, httpx.ConnectError("Connection refused"))

        with pytest.raises(VoiceProviderError) as exc_info:
            await voice_client.start_outbound_call("+15551234567")

        assert "Connection refused" in exc_info.value.message
        assert exc_info.value.timed_out is False

    @pytest.mark.asyncio
    async def test_missing_api_key_skips_network(
        self, unconfigured_settings, provider_http_client, fake_provider
    ):
        client = ElevenLabsClient(unconfigured_settings, http_client=provider_http_client)

        with pytest.raises(ConfigError):
            await client.start_outbound_call("+15551234567")

        assert fake_provider.requests == []


class TestConversationAndEndCall:
    @pytest.mark.asyncio
    async def test_get_conversation(self, voice_client, fake_provider):
        fake_provider.reply(
            "GET",
            "/v1/convai/conversations/abc123",
            httpx.Response(200, json={"conversation_id": "abc123", "status": "done"}),
        )

        data = await voice_client.get_conversation("abc123")

        assert data["status"] == "done"
        request = fake_provider.requests[0]
        assert request.headers["xi-api-key"] == "test-key"
        assert request.extensions["timeout"]["read"] == 10.0

    @pytest.mark.asyncio
    async def test_end_call(self, voice_client, fake_provider):
        fake_provider.reply(
            "POST", "/v1/convai/twilio/call/abc123/end", httpx.Response(200, json={})
        )

        data = await voice_client.end_call("abc123")

        assert data == {}
        request = fake_provider.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {}

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, voice_client, fake_provider):
        fake_provider.reply(
            "POST", "/v1/convai/twilio/call/abc123/end", httpx.Response(200, text="ok")
        )

        assert await voice_client.end_call("abc123") == {}
