"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from portfolio_backend.configs.chat import ChatSettings
from portfolio_backend.configs.embeddings import EmbeddingSettings
from portfolio_backend.configs.settings import Settings, get_settings

__all__ = ["ChatSettings", "EmbeddingSettings", "Settings", "get_settings"]
