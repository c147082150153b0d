"""
Indexing service for the content embedding index.

Keeps the index in step with the content tables: per-entity sync with
retrying embedding calls and an all-or-nothing write, full bounded-parallel
resync with orphan purging, deletions and the admin status views.

Dependencies: tenacity, sqlalchemy, portfolio_backend.boundary.db, portfolio_backend.core
System role: Indexing orchestration layer
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from portfolio_backend.application.chunker import TextChunker
from portfolio_backend.application.embedder import GeminiEmbedder
from portfolio_backend.boundary.db.base import as_utc, utc_now
from portfolio_backend.boundary.db.CRUD.content_crud import get_content_crud
from portfolio_backend.boundary.db.CRUD.embedding_crud import embedding_crud
from portfolio_backend.configs.embeddings import EmbeddingSettings
from portfolio_backend.core.entity_documents import entity_title, render_index_document
from portfolio_backend.core.exceptions import EmbeddingProviderError, EntityNotFoundError
from portfolio_backend.core.sync_status import derive_entity_status, sort_status_report
from portfolio_backend.models.embedding import (
    ChunkDetail,
    ChunkRecord,
    EmbeddingStats,
    SourceType,
    StatusReportItem,
    SyncOutcome,
    SyncReport,
)

logger = logging.getLogger(__name__)


class IndexingService:
    """
    Indexer for content entities.

    Every sync renders each supported language, chunks and embeds it, then
    replaces all of the entity's chunk sets in one transaction. Nothing is
    written until every chunk has a vector.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedder: GeminiEmbedder,
        chunker: TextChunker | None = None,
        settings: EmbeddingSettings | None = None,
    ) -> None:
        """
        Initialize indexing service.

        Args:
            session_factory: Factory for short-lived database sessions
            embedder: Embedding generator
            chunker: Text chunker (defaults to settings.max_chunk_length)
            settings: Embedding settings
        """
        self.session_factory = session_factory
        self.embedder = embedder
        self.settings = settings or EmbeddingSettings()
        self.chunker = chunker or TextChunker(self.settings.max_chunk_length)

    async def _embed_with_retry(self, text: str) -> list[float]:
        """Embed one chunk, retrying provider failures with jittered backoff."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(EmbeddingProviderError),
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.settings.retry_initial_wait_seconds,
                max=self.settings.retry_max_wait_seconds,
                jitter=self.settings.retry_jitter_seconds,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_embed_with_retry - Retry {retry_state.attempt_number}/"
                f"{self.settings.max_attempts} after embedding failure"
            ),
            reraise=True,
        ):
            with attempt:
                return await self.embedder.embed(text)

    async def _build_chunk_sets(self, documents: dict[str, str | None]) -> dict[str, list[ChunkRecord]]:
        chunk_sets: dict[str, list[ChunkRecord]] = {}
        for language, document in documents.items():
            texts = self.chunker.chunk(document) if document else []
            records = []
            for index, text in enumerate(texts):
                vector = await self._embed_with_retry(text)
                records.append(ChunkRecord(chunk_index=index, text=text, vector=vector))
            chunk_sets[language] = records
        return chunk_sets

    async def sync_one(self, source_type: SourceType, source_id: str) -> SyncOutcome:
        """
        Re-index one entity in every supported language.

        Flow:
        1. Load the entity and render one document per language
        2. Chunk and embed every document (no connection held)
        3. Replace all chunk sets in a single transaction

        Args:
            source_type: Entity type
            source_id: Entity id

        Returns:
            SyncOutcome: Chunk count and indexed languages

        Raises:
            EntityNotFoundError: If the entity does not exist (its chunks are removed)
            EmbeddingProviderError: If a chunk still fails after all retries (index untouched)
            IndexConsistencyError: If a chunk set is malformed (index untouched)
        """
        source_type = SourceType(source_type)
        logger.info(f"{__name__}:sync_one - START {source_type.value}/{source_id}")

        async with self.session_factory() as db:
            entity = await get_content_crud(source_type).get_by_source_id(db, source_id)
            if entity is None:
                removed = await embedding_crud.delete_chunks(db, source_type, source_id)
                await db.commit()
                logger.warning(
                    f"{__name__}:sync_one - Entity missing, removed {removed} stale chunks"
                )
                raise EntityNotFoundError(
                    source_type.value, source_id, details={"removed_chunks": removed}
                )
            documents = {
                language: render_index_document(source_type, entity, language)
                for language in self.settings.languages
            }

        chunk_sets = await self._build_chunk_sets(documents)

        async with self.session_factory() as db:
            written_at = utc_now()
            try:
                for language, records in chunk_sets.items():
                    if records:
                        await embedding_crud.replace_chunks(
                            db, source_type, source_id, language, records, written_at=written_at
                        )
                    else:
                        await embedding_crud.delete_chunks(db, source_type, source_id, language)
                await db.commit()
            except Exception as e:
                await db.rollback()
                logger.error(f"{__name__}:sync_one - Write failed for {source_type.value}/{source_id}: {e}")
                raise

        outcome = SyncOutcome(
            source_type=source_type,
            source_id=source_id,
            success=True,
            chunk_count=sum(len(records) for records in chunk_sets.values()),
            languages=[language for language, records in chunk_sets.items() if records],
        )
        logger.info(
            f"{__name__}:sync_one - END {source_type.value}/{source_id} chunks={outcome.chunk_count}"
        )
        return outcome

    async def _purge_orphans(self) -> int:
        """Delete chunks whose entity no longer exists."""
        async with self.session_factory() as db:
            existing = {
                (source_type, source_id)
                for source_type in SourceType
                for source_id in await get_content_crud(source_type).list_source_ids(db)
            }
            orphans = await embedding_crud.list_indexed_keys(db) - existing
            purged = 0
            for source_type, source_id in orphans:
                purged += await embedding_crud.delete_chunks(db, source_type, source_id)
            await db.commit()
        if orphans:
            logger.info(f"{__name__}:_purge_orphans - entities={len(orphans)}, chunks={purged}")
        return purged

    async def sync_all(self) -> SyncReport:
        """
        Re-index every entity of every type with bounded parallelism.

        A failing entity is reported and does not stop the others. Chunks
        of entities that no longer exist are purged afterwards.

        Returns:
            SyncReport: Totals and one outcome per entity
        """
        async with self.session_factory() as db:
            keys = [
                (source_type, source_id)
                for source_type in SourceType
                for source_id in await get_content_crud(source_type).list_source_ids(db)
            ]
        logger.info(f"{__name__}:sync_all - START entities={len(keys)}")

        semaphore = asyncio.Semaphore(max(1, self.settings.sync_concurrency))

        async def run(source_type: SourceType, source_id: str) -> SyncOutcome:
            async with semaphore:
                try:
                    return await self.sync_one(source_type, source_id)
                except Exception as e:
                    logger.error(
                        f"{__name__}:sync_all - {source_type.value}/{source_id} failed: "
                        f"{type(e).__name__}: {e}"
                    )
                    return SyncOutcome(
                        source_type=source_type,
                        source_id=source_id,
                        success=False,
                        error=str(e),
                    )

        outcomes = await asyncio.gather(*(run(source_type, source_id) for source_type, source_id in keys))
        purged = await self._purge_orphans()

        succeeded = sum(1 for outcome in outcomes if outcome.success)
        report = SyncReport(
            total=len(outcomes),
            succeeded=succeeded,
            failed=len(outcomes) - succeeded,
            purged_orphans=purged,
            outcomes=list(outcomes),
        )
        logger.info(
            f"{__name__}:sync_all - END total={report.total}, succeeded={report.succeeded}, "
            f"failed={report.failed}, purged={report.purged_orphans}"
        )
        return report

    async def clear_one(self, source_type: SourceType, source_id: str) -> int:
        """Delete every chunk of one entity. Returns rows removed."""
        async with self.session_factory() as db:
            deleted = await embedding_crud.delete_chunks(db, SourceType(source_type), source_id)
            await db.commit()
        logger.info(f"{__name__}:clear_one - {source_type}/{source_id} deleted={deleted}")
        return deleted

    async def clear_all(self) -> int:
        """Delete the whole index. Returns rows removed."""
        async with self.session_factory() as db:
            deleted = await embedding_crud.delete_all(db)
            await db.commit()
        logger.warning(f"{__name__}:clear_all - deleted={deleted}")
        return deleted

    async def get_status_report(self, source_type: SourceType | None = None) -> list[StatusReportItem]:
        """
        Sync status of every entity, optionally of one type.

        Returns:
            Items ordered missing, outdated, synced; newest edits first within each
        """
        source_type = SourceType(source_type) if source_type else None
        types = [source_type] if source_type else list(SourceType)
        supported = set(self.settings.languages)
        tolerance = self.settings.outdated_tolerance_seconds

        items: list[StatusReportItem] = []
        async with self.session_factory() as db:
            freshness = await embedding_crud.get_freshness(db, source_type=source_type)
            for entity_type in types:
                for entity in await get_content_crud(entity_type).get_all(db):
                    source_id = str(entity.id)
                    updated_at = as_utc(entity.updated_at)
                    languages = {t.language for t in entity.translations} & supported
                    status, language_statuses = derive_entity_status(
                        updated_at,
                        languages,
                        freshness.get((entity_type, source_id), {}),
                        tolerance,
                    )
                    indexed_times = [s.last_indexed_at for s in language_statuses if s.last_indexed_at]
                    items.append(
                        StatusReportItem(
                            source_type=entity_type,
                            source_id=source_id,
                            title=entity_title(entity_type, entity),
                            status=status,
                            updated_at=updated_at,
                            last_indexed_at=max(indexed_times) if indexed_times else None,
                            chunk_count=sum(s.chunk_count for s in language_statuses),
                            languages=language_statuses,
                        )
                    )
        return sort_status_report(items)

    async def get_chunk_details(self, source_type: SourceType, source_id: str) -> list[ChunkDetail]:
        """Stored chunks of one entity ordered by language, then index."""
        async with self.session_factory() as db:
            rows = await embedding_crud.get_chunk_details(db, SourceType(source_type), source_id)
            return [
                ChunkDetail(
                    id=str(row.id),
                    language=row.language,
                    chunk_index=row.chunk_index,
                    text=row.content,
                    updated_at=as_utc(row.updated_at),
                )
                for row in rows
            ]

    async def get_stats(self) -> EmbeddingStats:
        """Chunk totals overall and per type (zero for empty types)."""
        async with self.session_factory() as db:
            counts = await embedding_crud.count_by_source_type(db)
        by_type = {source_type.value: counts.get(source_type.value, 0) for source_type in SourceType}
        return EmbeddingStats(total=sum(by_type.values()), by_source_type=by_type)
