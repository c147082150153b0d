"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from portfolio_backend.configs.auth import AuthSettings
from portfolio_backend.configs.base import BaseSettings
from portfolio_backend.configs.chat import ChatSettings
from portfolio_backend.configs.database import DatabaseSettings
from portfolio_backend.configs.embeddings import EmbeddingSettings
from portfolio_backend.configs.notifications import NotificationSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    embeddings: EmbeddingSettings = EmbeddingSettings()
    chat: ChatSettings = ChatSettings()
    notifications: NotificationSettings = NotificationSettings()
    auth: AuthSettings = AuthSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from portfolio_backend.configs import get_settings
        settings = get_settings()
    """
    return Settings()
