import time

import httpx

from config.logging_config import get_logger, log_external_api_call
from services.discord_service.config import settings
from services.discord_service.schemas import DiscordMessage

logger = get_logger(__name__)

OK_STATUSES = (200, 201)


class DiscordAPIError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DiscordClient:
    """Thin async wrapper over the three Discord REST calls the bot needs."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.token = token if token is not None else settings.discord_bot_token
        self.base_url = (base_url or settings.discord_api_base).rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_s if timeout_s is not None else settings.request_timeout_s
        )

    async def __aenter__(self) -> "DiscordClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bot {self.token}",
            "Content-Type": "application/json",
        }

    def _require_token(self) -> None:
        if not self.token:
            raise DiscordAPIError("DISCORD_BOT_TOKEN not set")

    async def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        started = time.monotonic()
        try:
            r = await self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            log_external_api_call(logger, "discord", endpoint, time.monotonic() - started, None, error=e)
            raise DiscordAPIError(f"Discord API request failed: {e}") from e

        if r.status_code not in OK_STATUSES:
            log_external_api_call(logger, "discord", endpoint, time.monotonic() - started, r.status_code,
                                  error=r.reason_phrase)
            raise DiscordAPIError(f"Discord API error: {r.status_code} {r.reason_phrase}".rstrip(), r.status_code)

        log_external_api_call(logger, "discord", endpoint, time.monotonic() - started, r.status_code)
        return r

    async def send_message(self, channel_id: str, content: str | None = None, embeds: list[dict] | None = None) -> dict:
        self._require_token()
        payload: dict = {}
        if content is not None:
            payload["content"] = content
        if embeds:
            payload["embeds"] = embeds
        r = await self._request("POST", f"channels/{channel_id}/messages", json=payload)
        return r.json() if r.content else {}

    async def get_channel_messages(self, channel_id: str, limit: int = 5) -> list[DiscordMessage]:
        """Newest-first, as Discord returns them."""
        self._require_token()
        r = await self._request("GET", f"channels/{channel_id}/messages", params={"limit": limit})
        return [DiscordMessage.model_validate(m) for m in r.json()]

    async def health_check(self) -> bool:
        try:
            r = await self._client.get(f"{self.base_url}/users/@me", headers={"Authorization": f"Bot {self.token}"})
        except httpx.HTTPError as e:
            logger.error("Discord health check failed", extra={"error": str(e)})
            return False
        return r.status_code == 200
