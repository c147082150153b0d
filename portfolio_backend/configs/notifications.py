"""
Notification webhook configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Outbound notification configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from portfolio_backend.configs.base import BaseSettings


class NotificationSettings(BaseSettings):
    """Fire-and-forget webhook configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOTIFY_",
        case_sensitive=False,
        extra="ignore",
    )

    webhook_url: str | None = Field(
        default=None,
        description="Webhook endpoint (notifications disabled when unset)",
    )
    timeout_seconds: float = Field(default=5.0, description="Webhook request timeout")
    notify_on_new_session: bool = Field(
        default=True,
        description="Send a notification when a caller starts a new chat session",
    )
