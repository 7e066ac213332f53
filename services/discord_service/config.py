from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = Field(default="development")
    service_name: str = Field(default="discord_service")

    discord_bot_token: str | None = Field(default=None)
    discord_bot_id: str = Field(default="1475400776485441567")
    discord_bot_name: str = Field(default="Open Claw")
    discord_api_base: str = Field(default="https://discord.com/api/v10")

    # site or purpose -> channel id
    discord_channels: dict[str, str] = Field(default={
        "bruceac": "1476075748958666873",
        "meraki": "1476075750162567268",
        "general": "1475414276478075035",
    })

    default_site: str = Field(default="bruceac")

    poll_interval_s: float = Field(default=5.0)
    message_fetch_limit: int = Field(default=5, ge=1, le=100)
    poller_state_file: str = Field(default=".discord-poller-state.json")

    request_timeout_s: float = Field(default=10.0)


settings = Settings()
