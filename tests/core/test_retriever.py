"""
Test suite for SimilaritySearch.

Ranking rules are tested directly; database-backed paths run on SQLite with
the pgvector distance query patched, since SQLite has no cosine operator.

System role: Verification of retrieval business logic
"""

from unittest.mock import AsyncMock, patch

import pytest

from portfolio_backend.boundary.db.CRUD.embedding_crud import embedding_crud, max_distance
from portfolio_backend.core.retriever import SimilaritySearch, group_hits_by_entity, rank_hits
from portfolio_backend.models.embedding import SimilarityHit, SourceType


def _hit(source_id: str, distance: float, chunk_index: int = 0, source_type=SourceType.BLOG) -> SimilarityHit:
    return SimilarityHit(
        source_type=source_type,
        source_id=source_id,
        language="en",
        chunk_index=chunk_index,
        text=f"{source_id}#{chunk_index}",
        distance=distance,
    )


class TestRankHits:
    """Test suite for rank_hits."""

    def test_rank_hits_should_order_by_distance_then_chunk_index(self) -> None:
        # Arrange
        hits = [_hit("b", 0.3, 1), _hit("a", 0.1), _hit("b", 0.3, 0)]

        # Act
        ranked = rank_hits(hits, k=10, min_similarity=0.0)

        # Assert
        assert [(hit.source_id, hit.chunk_index) for hit in ranked] == [("a", 0), ("b", 0), ("b", 1)]

    def test_rank_hits_should_drop_hits_below_min_similarity(self) -> None:
        # Arrange
        hits = [_hit("close", 0.2), _hit("far", 0.6)]

        # Act
        ranked = rank_hits(hits, k=10, min_similarity=0.55)

        # Assert
        assert [hit.source_id for hit in ranked] == ["close"]
        assert all(hit.similarity >= 0.55 for hit in ranked)

    def test_rank_hits_should_keep_at_most_k(self) -> None:
        # Arrange
        hits = [_hit(str(i), i / 100) for i in range(10)]

        # Act
        ranked = rank_hits(hits, k=3, min_similarity=0.0)

        # Assert
        assert [hit.source_id for hit in ranked] == ["0", "1", "2"]

    def test_rank_hits_should_keep_hit_exactly_at_min_similarity(self) -> None:
        # Arrange
        hits = [_hit("edge", 0.45), _hit("beyond", 0.4501)]

        # Act
        ranked = rank_hits(hits, k=10, min_similarity=0.55)

        # Assert
        assert [hit.source_id for hit in ranked] == ["edge"]

    def test_rank_hits_should_return_empty_for_non_positive_k(self) -> None:
        assert rank_hits([_hit("a", 0.1)], k=0, min_similarity=0.0) == []


class TestMaxDistance:
    """Test suite for the query distance bound."""

    @pytest.mark.parametrize("min_similarity, distance", [(0.55, 0.45), (0.7, 0.3), (0.0, 1.0), (0.9, 0.1)])
    def test_max_distance_should_admit_hit_at_floor(self, min_similarity: float, distance: float) -> None:
        assert distance <= max_distance(min_similarity)

    def test_max_distance_should_exclude_hit_past_floor(self) -> None:
        assert 0.4501 > max_distance(0.55)


class TestGroupHitsByEntity:
    """Test suite for group_hits_by_entity."""

    def test_group_should_keep_best_similarity_per_entity(self) -> None:
        # Arrange
        hits = [_hit("a", 0.4, 0), _hit("b", 0.2), _hit("a", 0.1, 1)]

        # Act
        grouped = group_hits_by_entity(hits)

        # Assert
        assert [(source_id, round(similarity, 2)) for _, source_id, similarity in grouped] == [
            ("a", 0.9),
            ("b", 0.8),
        ]


class TestSearch:
    """Test suite for SimilaritySearch.search."""

    @pytest.mark.asyncio
    async def test_search_should_pass_language_and_threshold_to_store(self, test_async_db) -> None:
        # Arrange
        search = SimilaritySearch(test_async_db)
        query = AsyncMock(return_value=[_hit("b", 0.3), _hit("a", 0.1)])

        # Act
        with patch.object(embedding_crud, "query_by_similarity", query):
            hits = await search.search([0.1] * 768, "tr", k=8, min_similarity=0.55)

        # Assert
        query.assert_awaited_once()
        assert query.await_args.kwargs["language"] == "tr"
        assert query.await_args.kwargs["min_similarity"] == 0.55
        assert [hit.source_id for hit in hits] == ["a", "b"]
        distances = [hit.distance for hit in hits]
        assert distances == sorted(distances)

    @pytest.mark.asyncio
    async def test_search_should_return_empty_without_query_for_zero_k(self, test_async_db) -> None:
        # Arrange
        search = SimilaritySearch(test_async_db)
        query = AsyncMock()

        # Act
        with patch.object(embedding_crud, "query_by_similarity", query):
            hits = await search.search([0.1] * 768, "en", k=0, min_similarity=0.5)

        # Assert
        assert hits == []
        query.assert_not_awaited()


class TestFindSimilarEntities:
    """Test suite for SimilaritySearch.find_similar_entities."""

    @pytest.mark.asyncio
    async def test_find_similar_should_exclude_self_and_collapse_chunks(self, test_async_db) -> None:
        # Arrange
        search = SimilaritySearch(test_async_db)
        hits = [_hit("b", 0.1, 0), _hit("b", 0.2, 1), _hit("self", 0.0), _hit("c", 0.3), _hit("d", 0.4)]

        # Act
        with patch.object(embedding_crud, "get_first_chunk_vector", AsyncMock(return_value=[0.1] * 768)), \
                patch.object(embedding_crud, "query_by_similarity", AsyncMock(return_value=hits)) as query:
            similar = await search.find_similar_entities(SourceType.BLOG, "self", "en", k=2)

        # Assert
        assert [entity.source_id for entity in similar] == ["b", "c"]
        assert query.await_args.kwargs["k"] == 10
        assert query.await_args.kwargs["source_type"] == SourceType.BLOG
        assert query.await_args.kwargs["exclude_source_id"] == "self"

    @pytest.mark.asyncio
    async def test_find_similar_should_fall_back_to_recent_when_not_indexed(
        self, test_async_db, make_blog_post
    ) -> None:
        # Arrange
        anchor = await make_blog_post(test_async_db, slug="anchor")
        await make_blog_post(test_async_db, slug="second")
        await make_blog_post(test_async_db, slug="third")
        search = SimilaritySearch(test_async_db)

        # Act
        similar = await search.find_similar_entities(SourceType.BLOG, str(anchor.id), "en", k=5)

        # Assert
        assert len(similar) == 2
        assert str(anchor.id) not in {entity.source_id for entity in similar}
        assert all(entity.similarity is None for entity in similar)

    @pytest.mark.asyncio
    async def test_find_similar_should_fall_back_when_vector_query_fails(
        self, test_async_db, make_blog_post
    ) -> None:
        # Arrange
        anchor = await make_blog_post(test_async_db, slug="anchor")
        other = await make_blog_post(test_async_db, slug="other")
        other_id = str(other.id)
        search = SimilaritySearch(test_async_db)

        # Act
        with patch.object(embedding_crud, "get_first_chunk_vector", AsyncMock(return_value=[0.1] * 768)), \
                patch.object(
                    embedding_crud,
                    "query_by_similarity",
                    AsyncMock(side_effect=RuntimeError("operator does not exist")),
                ):
            similar = await search.find_similar_entities(SourceType.BLOG, str(anchor.id), "en", k=3)

        # Assert
        assert [entity.source_id for entity in similar] == [other_id]
