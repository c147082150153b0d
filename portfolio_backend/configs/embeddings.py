"""
Embedding and indexing configuration settings.

Controls the Gemini embedding model, chunk sizing, provider timeouts and
retry policy used when (re)building the content index.

Dependencies: pydantic, pydantic_settings
System role: Vector index configuration for portfolio retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from portfolio_backend.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding model and indexer configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="models/text-embedding-004",
        description="Google Gemini embedding model ID",
    )
    dimension: int = Field(
        default=768,
        description="Embedding vector dimension (must match the embeddings table column)",
    )
    max_chunk_length: int = Field(
        default=1000,
        description="Maximum characters per indexed chunk",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single embedding call",
    )

    max_attempts: int = Field(
        default=3,
        description="Attempts per chunk before an entity sync is declared failed",
    )
    retry_initial_wait_seconds: float = Field(
        default=1.0,
        description="Initial backoff between embedding retries",
    )
    retry_max_wait_seconds: float = Field(
        default=10.0,
        description="Maximum backoff between embedding retries",
    )
    retry_jitter_seconds: float = Field(
        default=1.0,
        description="Random jitter added to each embedding retry backoff",
    )
    sync_concurrency: int = Field(
        default=4,
        description="Number of entities indexed concurrently during a full sync",
    )

    languages: list[str] = Field(
        default=["en", "tr"],
        description="Locales that are chunked and indexed",
    )
    default_language: str = Field(
        default="en",
        description="Fallback locale for unsupported request locales",
    )
    outdated_tolerance_seconds: int = Field(
        default=5,
        description="Grace period before an entity counts as newer than its chunks",
    )
