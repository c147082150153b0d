"""
Exception hierarchy for the portfolio backend.

Provides layered exception structure for indexing, retrieval and chat errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class PortfolioBackendException(Exception):
    """Base exception for all portfolio backend errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(PortfolioBackendException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class EntityNotFoundError(PortfolioBackendException):
    """Raised when a content entity does not exist."""

    def __init__(
        self,
        source_type: str,
        source_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["source_type"] = source_type
        details["source_id"] = source_id
        super().__init__(f"{source_type} not found: {source_id}", details)


class QuotaExceededError(PortfolioBackendException):
    """Raised when a caller has used up today's chat requests."""

    def __init__(
        self,
        caller_address: str,
        limit: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize quota error.

        Args:
            caller_address: Network address of the rejected caller
            limit: Daily request limit that was reached
            details: Additional context
        """
        details = details or {}
        details["caller_address"] = caller_address
        details["limit"] = limit
        super().__init__(
            "Daily message limit reached. Please try again tomorrow.",
            details,
        )


class EmbeddingProviderError(PortfolioBackendException):
    """Raised when the embedding call fails, times out or returns a bad vector."""

    pass


class ModelGenerationError(PortfolioBackendException):
    """Raised when the generative model call fails or times out."""

    pass


class IndexConsistencyError(PortfolioBackendException):
    """Raised when a chunk set would leave the index partially written."""

    def __init__(
        self,
        message: str,
        source_type: str | None = None,
        source_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize index consistency error.

        Args:
            message: Error message
            source_type: Entity type being written
            source_id: Entity id being written
            details: Additional context
        """
        details = details or {}
        if source_type:
            details["source_type"] = source_type
        if source_id:
            details["source_id"] = source_id
        super().__init__(message, details)


class NotificationDeliveryError(PortfolioBackendException):
    """Raised when the notification webhook rejects or drops a message (non-critical)."""

    pass
