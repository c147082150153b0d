"""
Embedding chunk ORM model.

One row per (source_type, source_id, language, chunk_index) holding the chunk
text and its pgvector embedding.

Dependencies: sqlalchemy, pgvector, portfolio_backend.boundary.db.base
System role: Vector index persistence for portfolio retrieval
"""

from sqlalchemy import Enum, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from pgvector.sqlalchemy import Vector

from portfolio_backend.boundary.db.base import Base, TimestampMixin, UUIDMixin
from portfolio_backend.models.embedding import SourceType

EMBEDDING_DIMENSION = 768


class EmbeddingModel(Base, UUIDMixin, TimestampMixin):
    """
    Indexed chunk of an entity's translated text.

    Attributes:
        source_type: Owning entity type
        source_id: Owning entity id (string form)
        language: Locale of the chunk text
        chunk_index: 0-based position within the entity+language sequence
        content: Chunk text that was embedded
        embedding: Fixed-dimension vector compared with cosine distance
        updated_at: Time the chunk was written, used for sync status

    Constraints:
        (source_type, source_id, language, chunk_index): UNIQUE
    """

    __tablename__ = "embeddings"
    __table_args__ = (
        UniqueConstraint(
            "source_type",
            "source_id",
            "language",
            "chunk_index",
            name="uq_embeddings_chunk",
        ),
        Index("ix_embeddings_source", "source_type", "source_id"),
        Index("ix_embeddings_language", "language"),
    )

    source_type: Mapped[SourceType] = mapped_column(
        Enum(
            SourceType,
            native_enum=False,
            length=32,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    source_id: Mapped[str] = mapped_column(String(64), nullable=False)
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding = mapped_column(Vector(EMBEDDING_DIMENSION), nullable=False)
