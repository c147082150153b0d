"""Service orchestrators."""

from .chat_service import ChatService
from .indexing_service import IndexingService
from .notification_service import WebhookNotifier
from .related_service import RelatedContentService
from .session_service import ChatSessionController

__all__ = [
    "ChatService",
    "ChatSessionController",
    "IndexingService",
    "RelatedContentService",
    "WebhookNotifier",
]
