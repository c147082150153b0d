"""
Chat domain models and schemas.

Request/response schemas for the portfolio assistant and the source cards
it returns.

Dependencies: pydantic
System role: Chat API contracts
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from portfolio_backend.models.embedding import SourceType


class HistoryTurn(BaseModel):
    """One caller-supplied turn of recent conversation."""

    role: Literal["user", "assistant", "ai"] = Field(
        description="Speaker; 'ai' is accepted as an alias of 'assistant'",
    )
    content: str


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str = Field(min_length=1, description="User question or message")
    locale: str = Field(default="en", description="Response and retrieval language")
    history: list[HistoryTurn] = Field(default_factory=list, description="Recent turns")


class SourceItem(BaseModel):
    """Display-ready projection of a retrieved entity."""

    source_type: SourceType
    title: str
    description: str = ""
    url: str = Field(description="Canonical site URL")
    image_url: str | None = None
    github: str | None = None
    live_demo: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    similarity: float = Field(default=0.0, description="Best chunk similarity for this entity")


class ChatResponse(BaseModel):
    """Response schema for chat messages."""

    response: str
    sources: list[SourceItem]


class ChatOutcome(BaseModel):
    """Service-level result of one handled chat message."""

    response: str
    sources: list[SourceItem]
    session_id: UUID
    new_session: bool = False


class RelatedResponse(BaseModel):
    """Response schema for related-content lookups."""

    items: list[SourceItem]
