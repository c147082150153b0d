"""
Embedding index domain models and schemas.

Chunk records flowing into the index, similarity hits flowing out of it and
the admin-facing status and sync reports.

Dependencies: pydantic
System role: Vector index data contracts
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class SourceType(str, enum.Enum):
    """Content entity types that are chunked into the index."""

    PROJECT = "project"
    BLOG = "blog"
    PROFILE = "profile"
    EXPERIENCE = "experience"


class SyncStatus(str, enum.Enum):
    """
    Derived freshness of an entity's chunks.

    SYNCED: chunks exist and are at least as fresh as the entity
    OUTDATED: chunks exist but the entity changed after they were written
    MISSING: the entity has no chunks at all
    """

    SYNCED = "synced"
    OUTDATED = "outdated"
    MISSING = "missing"


class ChunkRecord(BaseModel):
    """One embedded chunk ready to be written to the index."""

    chunk_index: int = Field(ge=0, description="0-based position within entity+language")
    text: str = Field(description="Chunk source text")
    vector: list[float] = Field(description="Embedding vector")


class SimilarityHit(BaseModel):
    """A chunk returned by a similarity query."""

    source_type: SourceType
    source_id: str
    language: str
    chunk_index: int
    text: str
    distance: float = Field(description="Cosine distance to the query vector")

    @property
    def similarity(self) -> float:
        """Cosine similarity (1 - distance)."""
        return 1.0 - self.distance


class ChunkDetail(BaseModel):
    """Stored chunk as shown in the admin inspection view."""

    id: str
    language: str
    chunk_index: int
    text: str
    updated_at: datetime


class LanguageStatus(BaseModel):
    """Sync state of one language of an entity."""

    language: str
    status: SyncStatus
    chunk_count: int = 0
    last_indexed_at: datetime | None = None


class StatusReportItem(BaseModel):
    """One row of the admin embeddings dashboard."""

    source_type: SourceType
    source_id: str
    title: str
    status: SyncStatus
    updated_at: datetime = Field(description="Entity last modification time")
    last_indexed_at: datetime | None = Field(
        default=None,
        description="Newest chunk write across languages",
    )
    chunk_count: int = 0
    languages: list[LanguageStatus] = Field(default_factory=list)


class EmbeddingStats(BaseModel):
    """Chunk counts for the dashboard header."""

    total: int
    by_source_type: dict[str, int]


class SyncOutcome(BaseModel):
    """Result of indexing a single entity."""

    source_type: SourceType
    source_id: str
    success: bool
    chunk_count: int = 0
    languages: list[str] = Field(default_factory=list)
    error: str | None = None


class SyncReport(BaseModel):
    """Aggregate result of a full re-index."""

    total: int
    succeeded: int
    failed: int
    purged_orphans: int = 0
    outcomes: list[SyncOutcome] = Field(default_factory=list)


class SyncSingleRequest(BaseModel):
    """Request schema for re-indexing one entity."""

    source_type: SourceType
    source_id: str = Field(min_length=1)


class DeleteResponse(BaseModel):
    """Response schema for chunk deletions."""

    deleted: int = Field(description="Number of chunks removed")


class SimilarEntity(BaseModel):
    """An entity found near another entity in embedding space."""

    source_type: SourceType
    source_id: str
    similarity: float | None = Field(
        default=None,
        description="Best chunk similarity, None for recency fallback picks",
    )
