"""
Chat configuration settings.

Generation model, quota, session window and retrieval parameters for the
portfolio assistant.

Dependencies: pydantic, pydantic_settings
System role: Chat orchestration configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from portfolio_backend.configs.base import BaseSettings


class ChatSettings(BaseSettings):
    """Portfolio assistant configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHAT_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(default="gemini-2.5-flash-lite", description="Gemini chat model ID")
    temperature: float = Field(default=0.3, description="Generation temperature")
    generation_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single generation call",
    )

    daily_request_limit: int = Field(
        default=20,
        description="Requests per caller address per calendar day",
    )
    session_timeout_minutes: int = Field(
        default=120,
        description="Inactivity window after which a caller starts a new session",
    )
    history_limit: int = Field(
        default=10,
        description="Number of caller-supplied turns passed to the model",
    )

    search_top_k: int = Field(default=8, description="Chunks retrieved per question")
    min_similarity: float = Field(
        default=0.55,
        description="Minimum cosine similarity for a retrieved chunk",
    )

    source_display_threshold: float = Field(
        default=0.0,
        description="Minimum similarity for a source card (0 shows every fused source)",
    )
    max_sources: int | None = Field(
        default=None,
        description="Maximum number of source cards returned (None for no cap)",
    )

    intent_routing_enabled: bool = Field(
        default=False,
        description="Classify the message intent before retrieval",
    )
    intent_upgrade_threshold: float = Field(
        default=0.65,
        description="Similarity that upgrades general chat to a portfolio query",
    )

    assistant_name: str = Field(default="AutumnAI", description="Assistant persona name")
    owner_name: str = Field(default="Kadir", description="Portfolio owner name")
