import json

import httpx
import pytest
import respx

from services.discord_service.client import DiscordAPIError, DiscordClient

BASE = "https://discord.test/api/v10"


@pytest.mark.asyncio
async def test_send_message_posts_payload():
    with respx.mock:
        route = respx.post(f"{BASE}/channels/111/messages").respond(200, json={"id": "9"})

        async with DiscordClient(token="tkn", base_url=BASE) as client:
            out = await client.send_message("111", "hello", embeds=[{"title": "t"}])

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bot tkn"
        assert json.loads(request.content) == {"content": "hello", "embeds": [{"title": "t"}]}

    assert out == {"id": "9"}


@pytest.mark.asyncio
async def test_get_channel_messages():
    with respx.mock:
        route = respx.get(f"{BASE}/channels/111/messages").respond(200, json=[
            {"id": "2", "channel_id": "111", "author": {"id": "42", "username": "ricky"}, "content": "!help",
             "mentions": [], "timestamp": "2026-10-19T14:00:00+00:00"},
        ])

        async with DiscordClient(token="tkn", base_url=BASE) as client:
            messages = await client.get_channel_messages("111", limit=5)

        assert route.calls.last.request.url.params["limit"] == "5"

    assert messages[0].id == "2"
    assert messages[0].author.username == "ricky"


@pytest.mark.asyncio
async def test_non_ok_status_raises():
    with respx.mock:
        respx.post(f"{BASE}/channels/111/messages").respond(403)

        async with DiscordClient(token="tkn", base_url=BASE) as client:
            with pytest.raises(DiscordAPIError) as exc:
                await client.send_message("111", "hello")

    assert exc.value.status_code == 403
    assert str(exc.value).startswith("Discord API error: 403")


@pytest.mark.asyncio
async def test_transport_failure_raises():
    with respx.mock:
        respx.get(f"{BASE}/channels/111/messages").mock(side_effect=httpx.ConnectError("down"))

        async with DiscordClient(token="tkn", base_url=BASE) as client:
            with pytest.raises(DiscordAPIError):
                await client.get_channel_messages("111")


@pytest.mark.asyncio
async def test_missing_token_raises_before_request():
    async with DiscordClient(token="", base_url=BASE) as client:
        with pytest.raises(DiscordAPIError, match="DISCORD_BOT_TOKEN not set"):
            await client.send_message("111", "hello")


@pytest.mark.asyncio
async def test_health_check():
    with respx.mock:
        route = respx.get(f"{BASE}/users/@me")
        route.side_effect = [httpx.Response(200, json={"id": "1"}), httpx.Response(401)]

        async with DiscordClient(token="tkn", base_url=BASE) as client:
            assert await client.health_check() is True
            assert await client.health_check() is False
