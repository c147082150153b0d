"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    CallerContext,
    get_caller_address,
    get_caller_context,
    get_chat_service,
    get_embedder,
    get_indexing_service,
    get_llm_client,
    get_notifier,
    get_related_content_service,
    get_session_factory,
    get_settings_dependency,
    require_admin,
)

__all__ = [
    "CallerContext",
    "get_caller_address",
    "get_caller_context",
    "get_chat_service",
    "get_embedder",
    "get_indexing_service",
    "get_llm_client",
    "get_notifier",
    "get_related_content_service",
    "get_session_factory",
    "get_settings_dependency",
    "require_admin",
]
