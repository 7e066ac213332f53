import asyncio
import signal
import sys

from config.logging_config import get_logger, setup_logging
from services.discord_service.bot import CommandBot
from services.discord_service.client import DiscordClient
from services.discord_service.config import settings
from services.discord_service.poller import Poller, load_state

logger = get_logger(__name__)


async def run_poller(client: DiscordClient, stop_event: asyncio.Event | None = None) -> int:
    if not await client.health_check():
        logger.error("Bot health check failed. Check DISCORD_BOT_TOKEN.")
        return 1

    logger.info("Bot is healthy and connected to Discord")

    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    state = load_state(settings.poller_state_file)
    poller = Poller(client, CommandBot(client), state)

    logger.info(
        "Listening for commands",
        extra={"channels": list(poller.channels), "poll_interval_s": poller.interval_s},
    )

    try:
        await poller.run(stop_event)
    finally:
        logger.info("Shutting down, flushing poller state")
        poller.flush()
    return 0


async def main() -> int:
    setup_logging(settings.service_name)
    async with DiscordClient() as client:
        return await run_poller(client)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
