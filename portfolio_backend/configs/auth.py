"""
Admin authentication configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Privileged-caller configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from portfolio_backend.configs.base import BaseSettings


class AuthSettings(BaseSettings):
    """Admin token configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTH_",
        case_sensitive=False,
        extra="ignore",
    )

    admin_token: str | None = Field(
        default=None,
        description="Shared secret identifying the site owner (admin routes closed when unset)",
    )
