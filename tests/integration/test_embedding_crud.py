"""
Test suite for EmbeddingCRUD.

Exercises chunk set replacement, deletion and the freshness aggregates
against in-memory SQLite. Similarity ordering needs pgvector and is covered
at the service level with the query patched.

System role: Verification of index store persistence
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from portfolio_backend.boundary.db.CRUD.embedding_crud import embedding_crud
from portfolio_backend.boundary.db.models import EmbeddingModel
from portfolio_backend.core.exceptions import IndexConsistencyError
from portfolio_backend.models.embedding import ChunkRecord, SourceType

ENTITY_ID = "3f0e4a0c-2a7c-4b59-9a57-2f5d6c1e8b10"
WRITTEN_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _chunks(*texts: str) -> list[ChunkRecord]:
    return [
        ChunkRecord(chunk_index=i, text=text, vector=[(i + 1) / 10] * 768)
        for i, text in enumerate(texts)
    ]


class TestReplaceChunks:
    """Test suite for EmbeddingCRUD.replace_chunks."""

    @pytest.mark.asyncio
    async def test_replace_should_write_full_chunk_set(self, test_async_db) -> None:
        # Act
        written = await embedding_crud.replace_chunks(
            test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a", "b", "c"), written_at=WRITTEN_AT
        )

        # Assert
        rows = await embedding_crud.get_chunk_details(test_async_db, SourceType.BLOG, ENTITY_ID)
        assert written == 3
        assert [(row.chunk_index, row.content) for row in rows] == [(0, "a"), (1, "b"), (2, "c")]

    @pytest.mark.asyncio
    async def test_replace_should_drop_trailing_chunks_of_longer_set(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(
            test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a", "b", "c", "d", "e")
        )

        # Act
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("x", "y"))

        # Assert
        rows = await embedding_crud.get_chunk_details(test_async_db, SourceType.BLOG, ENTITY_ID)
        assert [(row.chunk_index, row.content) for row in rows] == [(0, "x"), (1, "y")]

    @pytest.mark.asyncio
    async def test_replace_should_leave_other_languages_alone(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "tr", _chunks("merhaba"))

        # Act
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("hello"))

        # Assert
        rows = await embedding_crud.get_chunk_details(test_async_db, SourceType.BLOG, ENTITY_ID)
        assert [(row.language, row.content) for row in rows] == [("en", "hello"), ("tr", "merhaba")]

    @pytest.mark.asyncio
    async def test_replace_should_reject_gapped_indices(self, test_async_db) -> None:
        # Arrange
        chunks = [
            ChunkRecord(chunk_index=0, text="a", vector=[0.1] * 768),
            ChunkRecord(chunk_index=2, text="c", vector=[0.1] * 768),
        ]

        # Act / Assert
        with pytest.raises(IndexConsistencyError) as exc_info:
            await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", chunks)
        assert exc_info.value.details["indices"] == [0, 2]

    @pytest.mark.asyncio
    async def test_replace_should_reject_wrong_dimension_without_writing(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("kept"))
        chunks = [ChunkRecord(chunk_index=0, text="short", vector=[0.1] * 3)]

        # Act
        with pytest.raises(IndexConsistencyError):
            await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", chunks)

        # Assert
        rows = await embedding_crud.get_chunk_details(test_async_db, SourceType.BLOG, ENTITY_ID)
        assert [row.content for row in rows] == ["kept"]

    @pytest.mark.asyncio
    async def test_chunk_key_should_be_unique(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a"))
        test_async_db.add(
            EmbeddingModel(
                source_type=SourceType.BLOG,
                source_id=ENTITY_ID,
                language="en",
                chunk_index=0,
                content="duplicate",
                embedding=[0.1] * 768,
            )
        )

        # Act / Assert
        with pytest.raises(IntegrityError):
            await test_async_db.flush()


class TestDeleteAndCounts:
    """Test suite for deletion and aggregate queries."""

    @pytest.mark.asyncio
    async def test_delete_chunks_should_scope_by_language(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a", "b"))
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "tr", _chunks("c"))

        # Act
        deleted_tr = await embedding_crud.delete_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "tr")
        deleted_rest = await embedding_crud.delete_chunks(test_async_db, SourceType.BLOG, ENTITY_ID)

        # Assert
        assert deleted_tr == 1
        assert deleted_rest == 2
        assert await embedding_crud.list_indexed_keys(test_async_db) == set()

    @pytest.mark.asyncio
    async def test_freshness_should_report_count_and_newest_write(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(
            test_async_db, SourceType.PROJECT, ENTITY_ID, "en", _chunks("a", "b"), written_at=WRITTEN_AT
        )

        # Act
        freshness = await embedding_crud.get_freshness(test_async_db)

        # Assert
        assert freshness == {(SourceType.PROJECT, ENTITY_ID): {"en": (2, WRITTEN_AT)}}

    @pytest.mark.asyncio
    async def test_count_by_source_type_should_group_totals(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.PROJECT, ENTITY_ID, "en", _chunks("a", "b"))
        await embedding_crud.replace_chunks(test_async_db, SourceType.PROFILE, "profile-1", "en", _chunks("c"))

        # Act
        counts = await embedding_crud.count_by_source_type(test_async_db)

        # Assert
        assert counts == {"project": 2, "profile": 1}

    @pytest.mark.asyncio
    async def test_first_chunk_vector_should_return_plain_floats(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a", "b"))

        # Act
        vector = await embedding_crud.get_first_chunk_vector(test_async_db, SourceType.BLOG, ENTITY_ID, "en")
        missing = await embedding_crud.get_first_chunk_vector(test_async_db, SourceType.BLOG, ENTITY_ID, "tr")

        # Assert
        assert len(vector) == 768
        assert vector[0] == pytest.approx(0.1)
        assert missing is None

    @pytest.mark.asyncio
    async def test_delete_all_should_empty_index(self, test_async_db) -> None:
        # Arrange
        await embedding_crud.replace_chunks(test_async_db, SourceType.BLOG, ENTITY_ID, "en", _chunks("a", "b"))

        # Act
        deleted = await embedding_crud.delete_all(test_async_db)

        # Assert
        result = await test_async_db.execute(select(EmbeddingModel))
        assert deleted == 2
        assert result.scalars().all() == []
