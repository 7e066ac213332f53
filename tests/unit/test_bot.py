import pytest

from services.discord_service.bot import CommandBot
from services.discord_service.client import DiscordAPIError
from services.discord_service.schemas import DiscordMessage

BOT_ID = "1475400776485441567"


class FakeClient:
    def __init__(self, fail_times=0):
        self.sent = []
        self.fail_times = fail_times

    async def send_message(self, channel_id, content=None, embeds=None):
        if self.fail_times:
            self.fail_times -= 1
            raise DiscordAPIError("Discord API error: 500", 500)
        self.sent.append((channel_id, content, embeds))
        return {"id": "1"}


def _message(content, author_id="42", mentions=()):
    return DiscordMessage(
        id="1000",
        channel_id="c1",
        author={"id": author_id, "username": "ricky"},
        content=content,
        mentions=[{"id": m, "username": "bot"} for m in mentions],
    )


@pytest.mark.asyncio
async def test_replies_to_mention():
    client = FakeClient()
    bot = CommandBot(client, bot_id=BOT_ID, bot_name="Open Claw")

    handled = await bot.handle_message(_message(f"<@{BOT_ID}> audit meraki", mentions=[BOT_ID]))

    assert handled is True
    assert len(client.sent) == 1
    channel_id, content, _ = client.sent[0]
    assert channel_id == "c1"
    assert "Meraki Restoration - Latest Audit" in content


@pytest.mark.asyncio
async def test_replies_to_prefix_command():
    client = FakeClient()
    bot = CommandBot(client, bot_id=BOT_ID)

    assert await bot.handle_message(_message("!help")) is True
    assert client.sent[0][1].startswith("**Available Commands:**")


@pytest.mark.asyncio
async def test_ignores_own_and_unaddressed_messages():
    client = FakeClient()
    bot = CommandBot(client, bot_id=BOT_ID)

    assert await bot.handle_message(_message("!help", author_id=BOT_ID)) is False
    assert await bot.handle_message(_message("just chatting")) is False
    assert client.sent == []


@pytest.mark.asyncio
async def test_send_failure_becomes_error_reply():
    client = FakeClient(fail_times=1)
    bot = CommandBot(client, bot_id=BOT_ID, bot_name="Open Claw")

    assert await bot.handle_message(_message("!status")) is True

    assert len(client.sent) == 1
    content = client.sent[0][1]
    assert content.startswith("❌ Error: Discord API error: 500")
    assert "Try `@Open Claw help`" in content


@pytest.mark.asyncio
async def test_error_reply_failure_is_swallowed():
    client = FakeClient(fail_times=2)
    bot = CommandBot(client, bot_id=BOT_ID)

    assert await bot.handle_message(_message("!status")) is True
    assert client.sent == []
