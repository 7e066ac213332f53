import asyncio
import json
import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.logging_config import get_logger
from services.discord_service.bot import CommandBot
from services.discord_service.client import DiscordClient
from services.discord_service.config import settings

logger = get_logger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PollerState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_message_ids: dict[str, str] = Field(default_factory=dict, alias="lastMessageIds")
    last_check: int = Field(default_factory=now_ms, alias="lastCheck")

    @field_validator("last_message_ids")
    @classmethod
    def validate_message_ids(cls, v: dict[str, str]) -> dict[str, str]:
        for channel_id, message_id in v.items():
            if not (message_id.isascii() and message_id.isdigit()):
                raise ValueError(f"message id for channel {channel_id} is not a snowflake: {message_id!r}")
        return v

    def is_new(self, channel_id: str, message_id: str) -> bool:
        last = self.last_message_ids.get(channel_id)
        # Snowflake ids exceed float precision; compare as ints.
        return last is None or int(message_id) > int(last)

    def mark_seen(self, channel_id: str, message_id: str) -> None:
        if self.is_new(channel_id, message_id):
            self.last_message_ids[channel_id] = message_id


def load_state(path: str | Path) -> PollerState:
    p = Path(path)
    try:
        if p.exists():
            return PollerState.model_validate(json.loads(p.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("Poller state unreadable, starting fresh", extra={"path": str(p), "error": str(e)})
    return PollerState()


def save_state(state: PollerState, path: str | Path) -> None:
    try:
        Path(path).write_text(json.dumps(state.model_dump(by_alias=True), indent=2), encoding="utf-8")
    except OSError as e:
        logger.error("Failed to save poller state", extra={"path": str(path), "error": str(e)})


class Poller:
    def __init__(
        self,
        client: DiscordClient,
        bot: CommandBot,
        state: PollerState,
        state_file: str | Path | None = None,
        channels: dict[str, str] | None = None,
        interval_s: float | None = None,
        fetch_limit: int | None = None,
    ):
        self.client = client
        self.bot = bot
        self.state = state
        self.state_file = state_file or settings.poller_state_file
        self.channels = channels if channels is not None else settings.discord_channels
        self.interval_s = interval_s if interval_s is not None else settings.poll_interval_s
        self.fetch_limit = fetch_limit or settings.message_fetch_limit

    async def poll_channel(self, name: str, channel_id: str) -> int:
        messages = await self.client.get_channel_messages(channel_id, self.fetch_limit)
        dispatched = 0
        for message in sorted(messages, key=lambda m: int(m.id)):
            if not self.state.is_new(channel_id, message.id):
                continue
            self.state.mark_seen(channel_id, message.id)

            logger.info(
                f"New message in #{name}: {message.author.username}",
                extra={"channel_id": channel_id, "message_id": message.id},
            )
            await self.bot.handle_message(message)
            dispatched += 1
        return dispatched

    async def poll_channels(self) -> int:
        logger.debug("Polling channels", extra={"channels": list(self.channels)})
        dispatched = 0
        for name, channel_id in self.channels.items():
            try:
                dispatched += await self.poll_channel(name, channel_id)
            except Exception as e:
                logger.error(f"Error polling #{name}", extra={"channel_id": channel_id, "error": str(e)})

        self.state.last_check = now_ms()
        self.flush()
        return dispatched

    def flush(self) -> None:
        save_state(self.state, self.state_file)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll until ``stop_event`` is set.

        Ticks never overlap: the wait for the next tick starts only after the
        previous tick, including its state save, has finished.
        """
        while not stop_event.is_set():
            try:
                await self.poll_channels()
            except Exception as e:
                logger.error("Polling error", extra={"error": str(e)}, exc_info=True)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_s)
            except asyncio.TimeoutError:
                pass
