"""Minimal Discord REST client used by the sync and context layers.

Wraps an aiohttp session with bot-token authentication. Only the
endpoints slashwire needs are covered:

    PUT  /applications/{app}/commands                    global overwrite
    PUT  /applications/{app}/guilds/{guild}/commands     guild overwrite
    POST /interactions/{id}/{token}/callback             initial response
    POST /webhooks/{app}/{token}                         followup message
    GET  /oauth2/applications/@me                        application id

Non-2xx responses raise PlatformAPIError; nothing is retried here.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from .exceptions import ConfigurationError, ErrorCategory, PlatformAPIError

logger = structlog.get_logger("slashwire.client")

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"
USER_AGENT = "DiscordBot (https://github.com/slashwire/slashwire, 0.1.0)"


class DiscordClient:
    """Async Discord REST client.

    Args:
        token: Bot token. Only required for authenticated endpoints
            (command overwrite, application lookup).
        application_id: Known application id; may be set later once
            the gateway reports ready.
        api_base_url: REST base URL including the API version.
        timeout: Total request timeout in seconds.
        session: Existing aiohttp session to reuse. A session passed in
            is not closed by close().
    """

    def __init__(
        self,
        token: str = "",
        *,
        application_id: str = "",
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.token = token
        self.application_id = application_id
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def start(self) -> None:
        """Create the HTTP session if one was not supplied."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_session = True

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
        self.session = None

    async def __aenter__(self) -> "DiscordClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        if not authenticated:
            return {}
        if not self.token:
            raise ConfigurationError(
                "a bot token is required for this request", setting_name="discord_token"
            )
        return {"Authorization": f"Bot {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        if self.session is None:
            await self.start()
        url = f"{self.api_base_url}{path}"
        headers = self._headers(authenticated)
        try:
            async with self.session.request(method, url, json=json, headers=headers) as resp:
                if resp.status == 204:
                    return None
                if resp.status >= 400:
                    body = await resp.text()
                    logger.warning(
                        "discord_request_failed",
                        method=method,
                        path=path,
                        status=resp.status,
                        body=body[:200],
                    )
                    raise PlatformAPIError(
                        f"{method} {path} failed with status {resp.status}",
                        status=resp.status,
                        body=body[:500],
                    )
                if resp.content_type == "application/json":
                    return await resp.json()
                return await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("discord_request_error", method=method, path=path, error=str(e))
            raise PlatformAPIError(
                f"{method} {path} failed: {e}", category=ErrorCategory.TRANSIENT
            ) from e

    async def fetch_application_id(self) -> str:
        """Look up the application id for the bot token and remember it."""
        data = await self._request("GET", "/oauth2/applications/@me")
        self.application_id = str(data["id"])
        logger.info("application_id_resolved", application_id=self.application_id)
        return self.application_id

    async def bulk_overwrite_application_commands(
        self,
        application_id: str,
        commands: List[Dict[str, Any]],
        guild_id: str = "",
    ) -> Any:
        """Replace every command in the given scope with ``commands``."""
        if guild_id:
            path = f"/applications/{application_id}/guilds/{guild_id}/commands"
        else:
            path = f"/applications/{application_id}/commands"
        return await self._request("PUT", path, json=commands)

    async def create_interaction_response(
        self,
        interaction_id: str,
        token: str,
        body: Dict[str, Any],
    ) -> Any:
        """Send the initial response to an interaction (no auth needed)."""
        path = f"/interactions/{interaction_id}/{token}/callback"
        return await self._request("POST", path, json=body, authenticated=False)

    async def create_followup_message(
        self,
        application_id: str,
        token: str,
        body: Dict[str, Any],
    ) -> Any:
        """Send a followup message; returns the created message."""
        path = f"/webhooks/{application_id}/{token}"
        return await self._request("POST", path, json=body, authenticated=False)
