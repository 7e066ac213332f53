import re
from typing import Callable

from services.discord_service.config import settings
from services.discord_service.schemas import ParsedCommand

COMMAND_PREFIX = "!"

SITE_NAMES = {
    "bruceac": "Bruce A/C",
}
FALLBACK_SITE_NAME = "Meraki Restoration"


def mention_pattern(bot_id: str) -> re.Pattern:
    return re.compile(rf"<@!?{re.escape(bot_id)}>")


def parse_command(content: str, bot_id: str | None = None) -> ParsedCommand | None:
    """Split ``<@BOT> cmd args`` or ``!cmd args`` into a command and its args.

    Returns ``None`` when the text is addressed neither by mention nor prefix.
    """
    pattern = mention_pattern(bot_id or settings.discord_bot_id)

    if pattern.search(content):
        clean = pattern.sub("", content, count=1).strip()
    elif content.startswith(COMMAND_PREFIX):
        clean = content[len(COMMAND_PREFIX):].strip()
    else:
        return None

    parts = clean.split()
    command = parts[0].lower() if parts else ""
    return ParsedCommand(command=command, args=parts[1:])


def site_name(site: str) -> str:
    return SITE_NAMES.get(site, FALLBACK_SITE_NAME)


def help_text(bot_name: str | None = None) -> str:
    name = bot_name or settings.discord_bot_name
    return (
        "**Available Commands:**\n"
        "```\n"
        f"@{name} audit [site]       - Get latest audit report\n"
        f"@{name} status [site]      - Check current status\n"
        f"@{name} recommendations    - Get top recommendations\n"
        f"@{name} help               - Show this help message\n"
        "```\n"
        "\n"
        f"**Sites:** `bruceac`, `meraki` (default: {settings.default_site})\n"
        "\n"
        "**Examples:**\n"
        f"• `@{name} audit meraki`\n"
        f"• `@{name} status`\n"
        f"• `@{name} recommendations bruceac`"
    )


def audit_reply(site: str) -> str:
    return (
        f"📊 **{site_name(site)} - Latest Audit**\n"
        "\n"
        "🔄 Fetching latest audit data...\n"
        "(Once Mission Control dashboard is live, this will show real metrics)\n"
        "\n"
        "**Expected Next Audit:** Monday 6 AM PST"
    )


def status_reply(site: str) -> str:
    return (
        f"🟢 **{site_name(site)} - Status**\n"
        "\n"
        "• Bot connection: ✅ Active\n"
        "• Audit schedule: Monday 6 AM PST\n"
        "• Last audit: Pending (first run Monday)\n"
        "\n"
        f"Use `@{settings.discord_bot_name} audit {site}` for detailed metrics"
    )


def recommendations_reply(site: str) -> str:
    return (
        f"💡 **{site_name(site)} - Top Recommendations**\n"
        "\n"
        "🔄 Fetching recommendations...\n"
        "(Once Mission Control dashboard is live, this will show ranked recommendations)\n"
        "\n"
        "Visit the dashboard for detailed breakdown by priority & effort."
    )


SITE_COMMANDS: dict[str, Callable[[str], str]] = {
    "audit": audit_reply,
    "status": status_reply,
    "recommendations": recommendations_reply,
}


def execute_command(command: str, args: list[str]) -> str:
    handler = SITE_COMMANDS.get(command)
    if handler is not None:
        return handler(args[0] if args else settings.default_site)
    if command == "help":
        return help_text()
    return f"❓ Unknown command: `{command}`\n{help_text()}"
