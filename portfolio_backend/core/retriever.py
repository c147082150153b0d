"""
Similarity search over the embedding index.

Answers "which chunks are closest to this query vector" for chat, and
"which entities are closest to this entity" for related content.

Dependencies: portfolio_backend.boundary.db.CRUD, sqlalchemy
System role: RAG retrieval business logic
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.CRUD.content_crud import get_content_crud
from portfolio_backend.boundary.db.CRUD.embedding_crud import embedding_crud, max_distance
from portfolio_backend.models.embedding import SimilarEntity, SimilarityHit, SourceType

logger = logging.getLogger(__name__)

RELATED_OVERFETCH = 5


def rank_hits(hits: Iterable[SimilarityHit], k: int, min_similarity: float) -> list[SimilarityHit]:
    """
    Apply the similarity floor, order by distance then chunk_index and keep k.

    Args:
        hits: Candidate hits
        k: Maximum hits to keep
        min_similarity: Minimum 1 - distance

    Returns:
        At most k hits, closest first
    """
    if k <= 0:
        return []
    ceiling = max_distance(min_similarity)
    kept = [hit for hit in hits if hit.distance <= ceiling]
    kept.sort(key=lambda hit: (hit.distance, hit.chunk_index))
    return kept[:k]


def group_hits_by_entity(hits: Iterable[SimilarityHit]) -> list[tuple[SourceType, str, float]]:
    """
    Collapse chunk hits to entities.

    Returns:
        (source_type, source_id, best similarity) ordered by best similarity
    """
    best: dict[tuple[SourceType, str], float] = {}
    for hit in hits:
        key = (hit.source_type, hit.source_id)
        best[key] = max(best.get(key, hit.similarity), hit.similarity)
    ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)
    return [(source_type, source_id, similarity) for (source_type, source_id), similarity in ranked]


class SimilaritySearch:
    """Vector retrieval against the index in one database session."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize search.

        Args:
            db: Async database session
        """
        self.db = db

    async def search(
        self,
        query_vector: list[float],
        language: str,
        k: int,
        min_similarity: float,
    ) -> list[SimilarityHit]:
        """
        Top-k chunks in one language at or above a similarity floor.

        Args:
            query_vector: Embedded query
            language: Hard language filter
            k: Maximum hits
            min_similarity: Minimum 1 - distance

        Returns:
            Hits ordered by distance, then chunk_index; possibly empty
        """
        if k <= 0:
            return []
        hits = await embedding_crud.query_by_similarity(
            self.db,
            query_vector,
            language=language,
            k=k,
            min_similarity=min_similarity,
        )
        ranked = rank_hits(hits, k, min_similarity)
        logger.info(f"{__name__}:search - language={language}, k={k}, hits={len(ranked)}")
        return ranked

    async def find_similar_entities(
        self,
        source_type: SourceType,
        source_id: str,
        language: str,
        k: int,
        min_similarity: float = 0.0,
    ) -> list[SimilarEntity]:
        """
        Entities of the same type closest to a given entity.

        Uses the entity's first chunk as its representative vector. When the
        entity is not indexed, the query fails or nothing qualifies, the most
        recently created entities of the type are returned instead.

        Args:
            source_type: Type of the anchor entity (results share it)
            source_id: Anchor entity id (never part of the result)
            language: Language of the chunks compared
            k: Maximum entities
            min_similarity: Minimum 1 - distance for a chunk to count

        Returns:
            Up to k distinct entities, most similar first
        """
        if k <= 0:
            return []

        similar: list[SimilarEntity] = []
        try:
            vector = await embedding_crud.get_first_chunk_vector(
                self.db, source_type, source_id, language
            )
            if vector is not None:
                hits = await embedding_crud.query_by_similarity(
                    self.db,
                    vector,
                    language=language,
                    k=k * RELATED_OVERFETCH,
                    min_similarity=min_similarity,
                    source_type=source_type,
                    exclude_source_id=source_id,
                )
                similar = [
                    SimilarEntity(source_type=hit_type, source_id=hit_id, similarity=similarity)
                    for hit_type, hit_id, similarity in group_hits_by_entity(hits)
                    if hit_id != source_id
                ][:k]
        except Exception as e:
            logger.warning(
                f"{__name__}:find_similar_entities - Vector lookup failed, using recent items: "
                f"{type(e).__name__}: {e}"
            )
            await self.db.rollback()
            similar = []

        if similar:
            return similar

        recent = await get_content_crud(source_type).list_recent(
            self.db, limit=k, exclude_source_id=source_id
        )
        logger.info(
            f"{__name__}:find_similar_entities - Fallback to recent {source_type.value} items: {len(recent)}"
        )
        return [SimilarEntity(source_type=source_type, source_id=str(entity.id)) for entity in recent]
