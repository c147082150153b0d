"""
Database models package.

Exports:
  - Content entities: ProjectModel, BlogPostModel, ProfileModel, WorkExperienceModel
    and their translation models, SkillModel
  - EmbeddingModel: Indexed chunk with pgvector embedding
  - ChatSessionModel, ChatMessageModel, MessageRole, RateLimitModel: Chat persistence

Dependencies: sqlalchemy, pgvector, portfolio_backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from portfolio_backend.boundary.db.models.content_model import (
    BlogPostModel,
    BlogPostTranslationModel,
    ProfileModel,
    ProfileTranslationModel,
    ProjectModel,
    ProjectTranslationModel,
    SkillModel,
    WorkExperienceModel,
    WorkExperienceTranslationModel,
)
from portfolio_backend.boundary.db.models.embedding_model import EMBEDDING_DIMENSION, EmbeddingModel
from portfolio_backend.boundary.db.models.chat_model import (
    ChatMessageModel,
    ChatSessionModel,
    MessageRole,
    RateLimitModel,
)

__all__ = [
    "BlogPostModel",
    "BlogPostTranslationModel",
    "ProfileModel",
    "ProfileTranslationModel",
    "ProjectModel",
    "ProjectTranslationModel",
    "SkillModel",
    "WorkExperienceModel",
    "WorkExperienceTranslationModel",
    "EMBEDDING_DIMENSION",
    "EmbeddingModel",
    "ChatMessageModel",
    "ChatSessionModel",
    "MessageRole",
    "RateLimitModel",
]
