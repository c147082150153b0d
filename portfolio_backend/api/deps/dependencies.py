"""
Dependency injection container.

Factory functions for FastAPI dependencies: settings, model clients,
services and caller identity.

Dependencies: portfolio_backend.configs, portfolio_backend.application, portfolio_backend.boundary
System role: DI container for service injection
"""

import secrets
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portfolio_backend.application.chunker import TextChunker
from portfolio_backend.application.embedder import GeminiEmbedder
from portfolio_backend.application.services import (
    ChatService,
    IndexingService,
    RelatedContentService,
    WebhookNotifier,
)
from portfolio_backend.boundary.db import get_async_db, get_async_session_factory
from portfolio_backend.boundary.llm import GeminiChatClient
from portfolio_backend.configs import Settings, get_settings

UNKNOWN_CALLER = "0.0.0.0"


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._embedder = None
        self._llm = None
        self._notifier = None

    @property
    def embedder(self) -> GeminiEmbedder:
        """Get cached embedder."""
        if self._embedder is None:
            settings = get_settings().embeddings
            self._embedder = GeminiEmbedder(
                model_id=settings.model,
                dimension=settings.dimension,
                timeout_seconds=settings.request_timeout_seconds,
            )
        return self._embedder

    @property
    def llm(self) -> GeminiChatClient:
        """Get cached chat model client."""
        if self._llm is None:
            settings = get_settings().chat
            self._llm = GeminiChatClient(
                model_id=settings.model,
                temperature=settings.temperature,
                timeout_seconds=settings.generation_timeout_seconds,
            )
        return self._llm

    @property
    def notifier(self) -> WebhookNotifier:
        """Get cached webhook notifier."""
        if self._notifier is None:
            settings = get_settings().notifications
            self._notifier = WebhookNotifier(
                webhook_url=settings.webhook_url,
                timeout_seconds=settings.timeout_seconds,
            )
        return self._notifier

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedder = None
        self._llm = None
        self._notifier = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_embedder() -> GeminiEmbedder:
    return get_service_cache().embedder


def get_llm_client() -> GeminiChatClient:
    return get_service_cache().llm


def get_notifier() -> WebhookNotifier:
    return get_service_cache().notifier


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_async_session_factory()


def get_caller_address(request: Request) -> str:
    """
    Network address of the caller.

    The first X-Forwarded-For entry wins, then X-Real-IP, then the socket
    peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CALLER


@dataclass(frozen=True)
class CallerContext:
    """Identity of the caller for one request."""

    address: str
    is_privileged: bool = False


def get_caller_context(
    request: Request,
    authorization: str | None = Header(default=None),
    x_admin_token: str | None = Header(default=None),
    settings: Settings = Depends(get_settings_dependency),
) -> CallerContext:
    """
    Resolve the caller and whether they hold the admin token.

    Accepts the token as "Authorization: Bearer <token>" or "X-Admin-Token".
    """
    expected = settings.auth.admin_token
    presented = x_admin_token
    if authorization and authorization.lower().startswith("bearer "):
        presented = authorization[7:].strip()
    is_privileged = bool(expected and presented and secrets.compare_digest(presented, expected))
    return CallerContext(address=get_caller_address(request), is_privileged=is_privileged)


def require_admin(caller: CallerContext = Depends(get_caller_context)) -> CallerContext:
    """
    Guard for admin routes.

    Raises:
        HTTPException(401): Missing or wrong admin token
    """
    if not caller.is_privileged:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin token required",
        )
    return caller


def get_chat_service(
    db: AsyncSession = Depends(get_async_db),
    embedder: GeminiEmbedder = Depends(get_embedder),
    llm: GeminiChatClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings_dependency),
) -> ChatService:
    """
    Get chat service instance.

    Args:
        db: Async database session (injected via Depends)
        embedder: Cached embedder
        llm: Cached chat model client
        settings: Application settings

    Returns:
        ChatService: Chat orchestrator bound to this request's session
    """
    return ChatService(
        db=db,
        embedder=embedder,
        llm=llm,
        settings=settings.chat,
        embedding_settings=settings.embeddings,
    )


def get_indexing_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    embedder: GeminiEmbedder = Depends(get_embedder),
    settings: Settings = Depends(get_settings_dependency),
) -> IndexingService:
    """
    Get indexing service instance.

    Uses a session factory rather than the request session, since a full
    sync opens one session per entity.
    """
    return IndexingService(
        session_factory=session_factory,
        embedder=embedder,
        chunker=TextChunker(settings.embeddings.max_chunk_length),
        settings=settings.embeddings,
    )


def get_related_content_service(db: AsyncSession = Depends(get_async_db)) -> RelatedContentService:
    """Get related content service instance."""
    return RelatedContentService(db=db)
