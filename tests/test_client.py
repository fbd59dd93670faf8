"""Tests for the Discord REST client, against an in-memory session."""

import aiohttp
import pytest

from slashwire import ConfigurationError, DiscordClient, PlatformAPIError
from slashwire.exceptions import ErrorCategory

API = "https://discord.test/api/v10"


class FakeResponse:

    def __init__(self, status=200, body=None, content_type="application/json"):
        self.status = status
        self.body = body
        self.content_type = content_type

    async def json(self):
        return self.body

    async def text(self):
        return "" if self.body is None else str(self.body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Records calls and answers with queued FakeResponses."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, headers=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def close(self):
        self.closed = True


def _client(session, token="bot-token", application_id="999"):
    return DiscordClient(token, application_id=application_id, api_base_url=API + "/", session=session)


class TestEndpoints:

    @pytest.mark.asyncio
    async def test_global_overwrite(self):
        session = FakeSession(FakeResponse(body=[{"id": "1"}]))
        client = _client(session)

        result = await client.bulk_overwrite_application_commands("999", [{"name": "ping"}])

        assert result == [{"id": "1"}]
        call = session.calls[0]
        assert call["method"] == "PUT"
        assert call["url"] == f"{API}/applications/999/commands"
        assert call["json"] == [{"name": "ping"}]
        assert call["headers"] == {"Authorization": "Bot bot-token"}

    @pytest.mark.asyncio
    async def test_guild_overwrite(self):
        session = FakeSession(FakeResponse(body=[]))
        client = _client(session)
        await client.bulk_overwrite_application_commands("999", [], guild_id="42")
        assert session.calls[0]["url"] == f"{API}/applications/999/guilds/42/commands"

    @pytest.mark.asyncio
    async def test_interaction_callback_is_unauthenticated(self):
        session = FakeSession(FakeResponse(status=204))
        client = _client(session, token="")

        result = await client.create_interaction_response("111", "tok", {"type": 4})

        assert result is None
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == f"{API}/interactions/111/tok/callback"
        assert call["headers"] == {}

    @pytest.mark.asyncio
    async def test_followup(self):
        session = FakeSession(FakeResponse(body={"id": "m1"}))
        client = _client(session)
        message = await client.create_followup_message("999", "tok", {"content": "hi"})
        assert message == {"id": "m1"}
        assert session.calls[0]["url"] == f"{API}/webhooks/999/tok"

    @pytest.mark.asyncio
    async def test_fetch_application_id(self):
        session = FakeSession(FakeResponse(body={"id": 123456789012345678}))
        client = _client(session, application_id="")
        assert await client.fetch_application_id() == "123456789012345678"
        assert client.application_id == "123456789012345678"
        assert session.calls[0]["url"] == f"{API}/oauth2/applications/@me"

    @pytest.mark.asyncio
    async def test_non_json_body_returned_as_text(self):
        session = FakeSession(FakeResponse(body="ok", content_type="text/plain"))
        client = _client(session)
        assert await client.bulk_overwrite_application_commands("999", []) == "ok"


class TestErrors:

    @pytest.mark.asyncio
    async def test_missing_token(self):
        session = FakeSession()
        client = _client(session, token="")
        with pytest.raises(ConfigurationError) as exc_info:
            await client.bulk_overwrite_application_commands("999", [])
        assert exc_info.value.setting_name == "discord_token"
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_rate_limited_is_transient(self):
        session = FakeSession(FakeResponse(status=429, body="slow down"))
        client = _client(session)
        with pytest.raises(PlatformAPIError) as exc_info:
            await client.bulk_overwrite_application_commands("999", [])
        assert exc_info.value.status == 429
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        session = FakeSession(FakeResponse(status=502, body="bad gateway"))
        client = _client(session)
        with pytest.raises(PlatformAPIError) as exc_info:
            await client.create_interaction_response("1", "tok", {"type": 4})
        assert exc_info.value.category == ErrorCategory.TRANSIENT

    @pytest.mark.asyncio
    async def test_bad_request_is_permanent(self):
        session = FakeSession(FakeResponse(status=400, body='{"code": 50035}'))
        client = _client(session)
        with pytest.raises(PlatformAPIError) as exc_info:
            await client.bulk_overwrite_application_commands("999", [{"name": ""}])
        assert exc_info.value.category == ErrorCategory.PERMANENT
        assert "50035" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
        client = _client(session)
        with pytest.raises(PlatformAPIError) as exc_info:
            await client.bulk_overwrite_application_commands("999", [])
        assert exc_info.value.status is None
        assert exc_info.value.is_retryable
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_supplied_session_not_closed(self):
        session = FakeSession()
        async with _client(session) as client:
            assert client.session is session
        assert session.closed is False
        assert client.session is None

    @pytest.mark.asyncio
    async def test_owned_session_created_and_closed(self):
        client = DiscordClient("bot-token")
        await client.start()
        try:
            assert isinstance(client.session, aiohttp.ClientSession)
        finally:
            await client.close()
        assert client.session is None
