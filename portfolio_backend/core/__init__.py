"""
Core business logic module.

Contains the exception hierarchy and the retrieval-side domain logic:
index document rendering, sync status rules, similarity ranking, context
fusion, prompt assembly and intent routing.
"""

from portfolio_backend.core.exceptions import (
    EmbeddingProviderError,
    EntityNotFoundError,
    IndexConsistencyError,
    ModelGenerationError,
    NotificationDeliveryError,
    PortfolioBackendException,
    QuotaExceededError,
    ValidationError,
)

__all__ = [
    "EmbeddingProviderError",
    "EntityNotFoundError",
    "IndexConsistencyError",
    "ModelGenerationError",
    "NotificationDeliveryError",
    "PortfolioBackendException",
    "QuotaExceededError",
    "ValidationError",
]
