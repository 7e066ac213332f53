import asyncio
import json

import pytest

from services.discord_service.client import DiscordAPIError
from services.discord_service.poller import Poller, PollerState, load_state, save_state
from services.discord_service.schemas import DiscordMessage


class FakeClient:
    def __init__(self, batches):
        self.batches = batches
        self.calls = []

    async def get_channel_messages(self, channel_id, limit=5):
        self.calls.append((channel_id, limit))
        batch = self.batches.get(channel_id, [])
        if isinstance(batch, Exception):
            raise batch
        return [
            DiscordMessage(id=mid, channel_id=channel_id, author={"id": "42", "username": "ricky"}, content="!help")
            for mid in batch
        ]


class RecordingBot:
    def __init__(self):
        self.seen = []

    async def handle_message(self, message):
        self.seen.append((message.channel_id, message.id))
        return True


def _poller(client, bot, tmp_path, state=None, channels=None):
    return Poller(
        client,
        bot,
        state or PollerState(),
        state_file=tmp_path / "state.json",
        channels=channels or {"bruceac": "c1"},
        interval_s=0.01,
        fetch_limit=5,
    )


@pytest.mark.asyncio
async def test_only_newer_messages_are_dispatched(tmp_path):
    client = FakeClient({"c1": ["101", "100", "99"]})
    bot = RecordingBot()
    state = PollerState(last_message_ids={"c1": "100"})
    poller = _poller(client, bot, tmp_path, state=state)

    dispatched = await poller.poll_channels()

    assert dispatched == 1
    assert bot.seen == [("c1", "101")]
    assert state.last_message_ids["c1"] == "101"


@pytest.mark.asyncio
async def test_fresh_channel_dispatches_oldest_first(tmp_path):
    client = FakeClient({"c1": ["103", "102", "101"]})
    bot = RecordingBot()
    poller = _poller(client, bot, tmp_path)

    await poller.poll_channels()

    assert [mid for _, mid in bot.seen] == ["101", "102", "103"]
    assert poller.state.last_message_ids["c1"] == "103"


@pytest.mark.asyncio
async def test_snowflake_ids_compare_exactly(tmp_path):
    # These two differ only beyond float precision.
    older, newer = "1476075748958666873", "1476075748958666874"
    client = FakeClient({"c1": [newer, older]})
    bot = RecordingBot()
    poller = _poller(client, bot, tmp_path, state=PollerState(last_message_ids={"c1": older}))

    await poller.poll_channels()

    assert bot.seen == [("c1", newer)]


@pytest.mark.asyncio
async def test_failing_channel_does_not_stop_others(tmp_path):
    client = FakeClient({"c1": DiscordAPIError("Discord API error: 403", 403), "c2": ["5"]})
    bot = RecordingBot()
    poller = _poller(client, bot, tmp_path, channels={"bruceac": "c1", "meraki": "c2"})

    dispatched = await poller.poll_channels()

    assert dispatched == 1
    assert bot.seen == [("c2", "5")]
    assert "c1" not in poller.state.last_message_ids


@pytest.mark.asyncio
async def test_tick_persists_state(tmp_path):
    client = FakeClient({"c1": ["7"]})
    poller = _poller(client, RecordingBot(), tmp_path)

    await poller.poll_channels()

    saved = json.loads((tmp_path / "state.json").read_text())
    assert saved["lastMessageIds"] == {"c1": "7"}
    assert isinstance(saved["lastCheck"], int)


@pytest.mark.asyncio
async def test_run_stops_on_event(tmp_path):
    client = FakeClient({"c1": []})
    poller = _poller(client, RecordingBot(), tmp_path)
    stop = asyncio.Event()

    task = asyncio.create_task(poller.run(stop))
    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    assert len(client.calls) >= 1


def test_state_roundtrip(tmp_path):
    path = tmp_path / "state.json"
    state = PollerState(last_message_ids={"c1": "1476075748958666873"}, last_check=123)

    save_state(state, path)
    loaded = load_state(path)

    assert loaded.last_message_ids == {"c1": "1476075748958666873"}
    assert loaded.last_check == 123


def test_missing_or_corrupt_state_starts_fresh(tmp_path):
    assert load_state(tmp_path / "absent.json").last_message_ids == {}

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json")
    assert load_state(corrupt).last_message_ids == {}


def test_mark_seen_never_moves_backwards():
    state = PollerState(last_message_ids={"c1": "100"})
    state.mark_seen("c1", "99")
    assert state.last_message_ids["c1"] == "100"
    assert state.is_new("c2", "1")


@pytest.mark.parametrize("bad_id", ["abc", "", "12a", "²"])
def test_non_numeric_stored_id_resets_state(tmp_path, bad_id):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"lastMessageIds": {"c1": bad_id}, "lastCheck": 1}))

    assert load_state(path).last_message_ids == {}


@pytest.mark.asyncio
async def test_poller_recovers_from_bad_stored_id(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"lastMessageIds": {"c1": "abc"}, "lastCheck": 1}))
    client = FakeClient({"c1": ["11", "10"]})
    bot = RecordingBot()
    poller = _poller(client, bot, tmp_path, state=load_state(path))

    await poller.poll_channels()

    assert bot.seen == [("c1", "10"), ("c1", "11")]
    assert json.loads(path.read_text())["lastMessageIds"] == {"c1": "11"}
