"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from portfolio_backend.boundary.db.CRUD import embedding_crud, chat_session_crud

    hits = await embedding_crud.query_by_similarity(db, vector, "en", k=8, min_similarity=0.55)
"""

from portfolio_backend.boundary.db.CRUD.base_crud import BaseCRUD
from portfolio_backend.boundary.db.CRUD.embedding_crud import EmbeddingCRUD, embedding_crud
from portfolio_backend.boundary.db.CRUD.content_crud import (
    ContentCRUD,
    blog_post_crud,
    get_content_crud,
    profile_crud,
    project_crud,
    work_experience_crud,
)
from portfolio_backend.boundary.db.CRUD.chat_crud import (
    ChatMessageCRUD,
    ChatSessionCRUD,
    RateLimitCRUD,
    chat_message_crud,
    chat_session_crud,
    rate_limit_crud,
)

__all__ = [
    "BaseCRUD",
    "EmbeddingCRUD",
    "embedding_crud",
    "ContentCRUD",
    "blog_post_crud",
    "get_content_crud",
    "profile_crud",
    "project_crud",
    "work_experience_crud",
    "ChatMessageCRUD",
    "ChatSessionCRUD",
    "RateLimitCRUD",
    "chat_message_crud",
    "chat_session_crud",
    "rate_limit_crud",
]
