"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Channel credentials are optional: an unset URL or key disables that channel

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Notification channel config is copied into explicit ChannelConfig structs at
      startup (NotificationConfig.from_settings) and handed to the adapters
"""

from dataclasses import dataclass, field
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://crewdesk:crewdesk@db:5432/crewdesk"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Notification channels (empty = disabled)
    whatsapp_api_url: str = ""
    whatsapp_api_key: str = ""
    sms_api_url: str = ""
    sms_api_key: str = ""
    notification_timeout_seconds: float = 5.0

    # Directory listing
    default_page_limit: int = 10
    max_page_limit: int = 100

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass
class ChannelConfig:
    """Credentials for one outbound messaging transport.

    Held by reference in the channel adapter; enablement and the request
    timeout are read on every send so an in-place refresh takes effect
    without rebuilding adapters.
    """
    api_url: str = ""
    api_key: str = ""
    timeout_seconds: float = 5.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_url and self.api_key)


@dataclass
class NotificationConfig:
    """Per-channel configuration plus the per-attempt send timeout.

    The dispatcher and the adapters keep a reference to this object, so
    refresh() changes what the next send uses.
    """
    whatsapp: ChannelConfig = field(default_factory=ChannelConfig)
    sms: ChannelConfig = field(default_factory=ChannelConfig)
    timeout_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationConfig":
        config = cls()
        config.refresh(settings)
        return config

    def refresh(self, settings: Settings) -> None:
        """Copy channel credentials and timeouts into the existing structs."""
        self.whatsapp.api_url = settings.whatsapp_api_url.rstrip("/")
        self.whatsapp.api_key = settings.whatsapp_api_key
        self.sms.api_url = settings.sms_api_url
        self.sms.api_key = settings.sms_api_key
        self.timeout_seconds = settings.notification_timeout_seconds
        self.whatsapp.timeout_seconds = self.timeout_seconds
        self.sms.timeout_seconds = self.timeout_seconds
