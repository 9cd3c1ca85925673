"""Service configuration read from GARDEN_* environment variables (and .env)."""
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VerificationMode(str, Enum):
    """Whether confirm() requires a prior email-ownership verification."""

    DIRECT_CONFIRM = "direct-confirm"
    VERIFY_THEN_CONFIRM = "verify-then-confirm"


class Transport(str, Enum):
    """How a feed channel is received."""

    POLL = "poll"
    STREAM = "stream"


class Settings(BaseSettings):
    """Configuration options for the alert service."""

    # Mail transport
    notifier_backend: Literal["log", "smtp"] = "log"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_timeout: float = 30.0
    sender_name: str = "Grow A Garden Bot"
    max_concurrent_sends: int = 5

    # Links placed in outgoing emails
    public_base_url: str = "http://127.0.0.1:3000"

    # Upstream feeds
    stock_transport: Transport = Transport.STREAM
    stock_url: str = "wss://websocket.joshlei.com/growagarden?user_id=emailer"
    weather_transport: Transport = Transport.POLL
    weather_url: str = "https://api.joshlei.com/v2/growagarden/weather"
    catalog_url: str = "https://api.joshlei.com/v2/growagarden/info/"
    image_base_url: str = "https://api.joshlei.com/v2/growagarden/image"

    poll_interval: float = 15.0
    poll_max_attempts: int = 5
    reconnect_delay: float = 5.0
    request_timeout: float = 10.0

    # Subscriptions
    verification_mode: VerificationMode = VerificationMode.VERIFY_THEN_CONFIRM
    verification_ttl_seconds: float = 24 * 60 * 60
    sweep_interval: float = 60 * 60

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GARDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_smtp_credentials(self) -> "Settings":
        if self.notifier_backend == "smtp" and not (self.smtp_user and self.smtp_password):
            raise ValueError(
                "GARDEN_SMTP_USER and GARDEN_SMTP_PASSWORD are required for the smtp backend"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
