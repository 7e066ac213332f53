import asyncio
import json

import pytest

from services.discord_service import main as discord_main
from services.discord_service.config import settings


class FakeClient:
    def __init__(self, healthy=True):
        self.healthy = healthy
        self.fetches = 0

    async def health_check(self):
        return self.healthy

    async def get_channel_messages(self, channel_id, limit=5):
        self.fetches += 1
        return []

    async def send_message(self, channel_id, content=None, embeds=None):
        return {}


@pytest.mark.asyncio
async def test_unhealthy_bot_exits_with_error():
    assert await discord_main.run_poller(FakeClient(healthy=False)) == 1


@pytest.mark.asyncio
async def test_poller_flushes_state_on_shutdown(tmp_path, monkeypatch):
    state_file = tmp_path / "state.json"
    monkeypatch.setattr(settings, "poller_state_file", str(state_file))
    monkeypatch.setattr(settings, "discord_channels", {"bruceac": "111"})
    monkeypatch.setattr(settings, "poll_interval_s", 0.01)

    client = FakeClient()
    stop = asyncio.Event()
    task = asyncio.create_task(discord_main.run_poller(client, stop))
    await asyncio.sleep(0.05)
    stop.set()

    assert await asyncio.wait_for(task, timeout=1) == 0
    assert client.fetches >= 1
    assert "lastMessageIds" in json.loads(state_file.read_text())
