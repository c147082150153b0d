"""
Embedding index CRUD operations.

Replace-on-write chunk sets, pgvector cosine similarity queries and the
freshness aggregates behind the admin sync dashboard.

Dependencies: sqlalchemy, pgvector, portfolio_backend.boundary.db.models
System role: Index Store persistence operations
"""

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.base import as_utc, utc_now
from portfolio_backend.boundary.db.CRUD.base_crud import BaseCRUD
from portfolio_backend.boundary.db.models.embedding_model import EmbeddingModel
from portfolio_backend.core.exceptions import IndexConsistencyError
from portfolio_backend.models.embedding import ChunkRecord, SimilarityHit, SourceType

logger = logging.getLogger(__name__)

EntityKey = tuple[SourceType, str]
# language -> (chunk_count, newest chunk updated_at)
LanguageFreshness = dict[str, tuple[int, datetime]]
# Absorbs float error in 1 - min_similarity so a hit exactly at the floor is kept
DISTANCE_EPSILON = 1e-9


def max_distance(min_similarity: float) -> float:
    """Largest cosine distance a row may have to meet a similarity floor."""
    return 1.0 - min_similarity + DISTANCE_EPSILON


class EmbeddingCRUD(BaseCRUD[EmbeddingModel]):
    """
    CRUD operations for EmbeddingModel.

    Writes never commit; the caller owns the transaction so an entity's
    languages are replaced together or not at all.
    """

    def __init__(self) -> None:
        """Initialize EmbeddingCRUD with EmbeddingModel."""
        super().__init__(EmbeddingModel)
        self.dimension: int = EmbeddingModel.__table__.c.embedding.type.dim

    def _validate_chunk_set(
        self,
        source_type: SourceType,
        source_id: str,
        chunks: Sequence[ChunkRecord],
    ) -> None:
        indices = [chunk.chunk_index for chunk in chunks]
        if indices != list(range(len(chunks))):
            raise IndexConsistencyError(
                "Chunk indices must be contiguous from 0",
                source_type=source_type.value,
                source_id=source_id,
                details={"indices": indices},
            )
        for chunk in chunks:
            if len(chunk.vector) != self.dimension:
                raise IndexConsistencyError(
                    "Chunk vector has the wrong dimension",
                    source_type=source_type.value,
                    source_id=source_id,
                    details={
                        "chunk_index": chunk.chunk_index,
                        "expected": self.dimension,
                        "actual": len(chunk.vector),
                    },
                )

    async def replace_chunks(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
        language: str,
        chunks: Sequence[ChunkRecord],
        written_at: datetime | None = None,
    ) -> int:
        """
        Replace the whole chunk set of one entity+language.

        Existing rows for the key are deleted and the new set inserted in the
        caller's transaction, so trailing indices from a longer previous set
        never survive.

        Args:
            session: Async database session
            source_type: Owning entity type
            source_id: Owning entity id
            language: Locale of the chunk set
            chunks: Complete new chunk set, indices 0..n-1
            written_at: Timestamp stamped on every row (defaults to now)

        Returns:
            Number of chunks written

        Raises:
            IndexConsistencyError: If indices are not contiguous or a vector has the wrong size
        """
        self._validate_chunk_set(source_type, source_id, chunks)
        written_at = written_at or utc_now()

        await self.delete_chunks(session, source_type, source_id, language)
        session.add_all(
            [
                EmbeddingModel(
                    source_type=source_type,
                    source_id=source_id,
                    language=language,
                    chunk_index=chunk.chunk_index,
                    content=chunk.text,
                    embedding=chunk.vector,
                    created_at=written_at,
                    updated_at=written_at,
                )
                for chunk in chunks
            ]
        )
        await session.flush()
        logger.debug(
            f"{__name__}:replace_chunks - {source_type.value}/{source_id}/{language} chunks={len(chunks)}"
        )
        return len(chunks)

    async def delete_chunks(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
        language: str | None = None,
    ) -> int:
        """
        Delete an entity's chunks, optionally for one language only.

        Returns:
            Number of rows deleted
        """
        stmt = delete(EmbeddingModel).where(
            EmbeddingModel.source_type == source_type,
            EmbeddingModel.source_id == source_id,
        )
        if language is not None:
            stmt = stmt.where(EmbeddingModel.language == language)
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def delete_all(self, session: AsyncSession) -> int:
        """Delete every chunk in the index."""
        result = await session.execute(delete(EmbeddingModel))
        return result.rowcount or 0

    async def query_by_similarity(
        self,
        session: AsyncSession,
        vector: Sequence[float],
        language: str,
        k: int,
        min_similarity: float,
        source_type: SourceType | None = None,
        exclude_source_id: str | None = None,
    ) -> list[SimilarityHit]:
        """
        Return up to k chunks closest to vector by cosine distance.

        Args:
            session: Async database session
            vector: Query vector
            language: Hard language filter
            k: Maximum number of rows
            min_similarity: Rows with 1 - distance below this are excluded
            source_type: Optional entity type filter
            exclude_source_id: Optional entity id to leave out

        Returns:
            Hits ordered by distance, then chunk_index
        """
        distance = EmbeddingModel.embedding.cosine_distance(list(vector))
        stmt = (
            select(
                EmbeddingModel.source_type,
                EmbeddingModel.source_id,
                EmbeddingModel.language,
                EmbeddingModel.chunk_index,
                EmbeddingModel.content,
                distance.label("distance"),
            )
            .where(EmbeddingModel.language == language)
            .where(distance <= max_distance(min_similarity))
        )
        if source_type is not None:
            stmt = stmt.where(EmbeddingModel.source_type == source_type)
        if exclude_source_id is not None:
            stmt = stmt.where(EmbeddingModel.source_id != exclude_source_id)
        stmt = stmt.order_by(distance, EmbeddingModel.chunk_index).limit(k)

        result = await session.execute(stmt)
        return [
            SimilarityHit(
                source_type=row.source_type,
                source_id=row.source_id,
                language=row.language,
                chunk_index=row.chunk_index,
                text=row.content,
                distance=float(row.distance),
            )
            for row in result.all()
        ]

    async def get_first_chunk_vector(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
        language: str,
    ) -> list[float] | None:
        """Vector of chunk 0 of an entity+language, None when not indexed."""
        stmt = select(EmbeddingModel.embedding).where(
            EmbeddingModel.source_type == source_type,
            EmbeddingModel.source_id == source_id,
            EmbeddingModel.language == language,
            EmbeddingModel.chunk_index == 0,
        )
        result = await session.execute(stmt)
        vector = result.scalar_one_or_none()
        if vector is None:
            return None
        return [float(value) for value in vector]

    async def get_freshness(
        self,
        session: AsyncSession,
        source_type: SourceType | None = None,
    ) -> dict[EntityKey, LanguageFreshness]:
        """
        Chunk count and newest write per entity and language.

        Returns:
            {(source_type, source_id): {language: (chunk_count, last_indexed_at)}}
        """
        stmt = select(
            EmbeddingModel.source_type,
            EmbeddingModel.source_id,
            EmbeddingModel.language,
            func.count(EmbeddingModel.id),
            func.max(EmbeddingModel.updated_at),
        ).group_by(
            EmbeddingModel.source_type,
            EmbeddingModel.source_id,
            EmbeddingModel.language,
        )
        if source_type is not None:
            stmt = stmt.where(EmbeddingModel.source_type == source_type)

        result = await session.execute(stmt)
        freshness: dict[EntityKey, LanguageFreshness] = {}
        for row_type, row_id, language, chunk_count, last_indexed_at in result.all():
            freshness.setdefault((row_type, row_id), {})[language] = (
                int(chunk_count),
                as_utc(last_indexed_at),
            )
        return freshness

    async def list_indexed_keys(self, session: AsyncSession) -> set[EntityKey]:
        """Distinct (source_type, source_id) pairs that have chunks."""
        stmt = select(EmbeddingModel.source_type, EmbeddingModel.source_id).distinct()
        result = await session.execute(stmt)
        return {(row_type, row_id) for row_type, row_id in result.all()}

    async def get_chunk_details(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> Sequence[EmbeddingModel]:
        """Stored chunks of an entity ordered by language, then chunk_index."""
        stmt = (
            select(EmbeddingModel)
            .where(
                EmbeddingModel.source_type == source_type,
                EmbeddingModel.source_id == source_id,
            )
            .order_by(EmbeddingModel.language, EmbeddingModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_source_type(self, session: AsyncSession) -> dict[str, int]:
        """Chunk totals keyed by source type value."""
        stmt = select(EmbeddingModel.source_type, func.count(EmbeddingModel.id)).group_by(
            EmbeddingModel.source_type
        )
        result = await session.execute(stmt)
        return {row_type.value: int(total) for row_type, total in result.all()}


embedding_crud = EmbeddingCRUD()
