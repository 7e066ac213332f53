from config.logging_config import get_logger
from services.discord_service.client import DiscordClient
from services.discord_service.commands import COMMAND_PREFIX, execute_command, parse_command
from services.discord_service.config import settings
from services.discord_service.schemas import DiscordMessage

logger = get_logger(__name__)


class CommandBot:
    def __init__(self, client: DiscordClient, bot_id: str | None = None, bot_name: str | None = None):
        self.client = client
        self.bot_id = bot_id or settings.discord_bot_id
        self.bot_name = bot_name or settings.discord_bot_name

    def is_addressed(self, message: DiscordMessage) -> bool:
        if message.content.startswith(COMMAND_PREFIX):
            return True
        return any(m.id == self.bot_id for m in message.mentions)

    async def handle_message(self, message: DiscordMessage) -> bool:
        """Answer ``message`` if it is a command. Returns True when a reply was attempted.

        Never raises: dispatch errors become an error reply, and a failure to
        deliver that reply is only logged.
        """
        if message.author.id == self.bot_id:
            return False
        if not self.is_addressed(message):
            return False

        parsed = parse_command(message.content, self.bot_id)
        if parsed is None:
            return False

        logger.info(
            f"Command received: {parsed.command} {' '.join(parsed.args)}".rstrip(),
            extra={"channel_id": message.channel_id, "author": message.author.username},
        )

        try:
            response = execute_command(parsed.command, parsed.args)
            await self.client.send_message(message.channel_id, response)
            logger.info("Response sent", extra={"channel_id": message.channel_id})
        except Exception as e:
            logger.error(
                "Error executing command",
                extra={"channel_id": message.channel_id, "command": parsed.command, "error": str(e)},
            )
            await self._send_error_reply(message.channel_id, e)
        return True

    async def _send_error_reply(self, channel_id: str, error: Exception) -> None:
        try:
            await self.client.send_message(
                channel_id,
                f"❌ Error: {error}\n\nTry `@{self.bot_name} help` for available commands.",
            )
        except Exception as e:
            logger.error("Failed to deliver error reply", extra={"channel_id": channel_id, "error": str(e)})
