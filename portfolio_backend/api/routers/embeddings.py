"""Embedding index admin endpoints.

Routes:
- GET    /admin/embeddings                          - Chunk totals
- GET    /admin/embeddings/items                    - Per-entity sync status
- GET    /admin/embeddings/{source_type}/{id}/chunks - Stored chunks of an entity
- POST   /admin/embeddings/sync                     - Re-index everything
- POST   /admin/embeddings/sync-single              - Re-index one entity
- DELETE /admin/embeddings                          - Clear the index
- DELETE /admin/embeddings/{source_type}/{id}       - Clear one entity

Dependencies: portfolio_backend.application.services.indexing_service, portfolio_backend.api.deps
System role: Index maintenance HTTP API (site owner only)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from portfolio_backend.api.deps import get_indexing_service, require_admin
from portfolio_backend.application.services.indexing_service import IndexingService
from portfolio_backend.core.exceptions import (
    EmbeddingProviderError,
    EntityNotFoundError,
    IndexConsistencyError,
)
from portfolio_backend.models.embedding import (
    ChunkDetail,
    DeleteResponse,
    EmbeddingStats,
    SourceType,
    StatusReportItem,
    SyncOutcome,
    SyncReport,
    SyncSingleRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/embeddings",
    tags=["embeddings"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=EmbeddingStats)
async def get_stats(
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> EmbeddingStats:
    """Chunk totals overall and per source type."""
    return await indexing_service.get_stats()


@router.get("/items", response_model=list[StatusReportItem])
async def list_items(
    source_type: SourceType | None = None,
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> list[StatusReportItem]:
    """Sync status of every entity, missing and outdated first."""
    return await indexing_service.get_status_report(source_type)


@router.get("/{source_type}/{source_id}/chunks", response_model=list[ChunkDetail])
async def get_chunks(
    source_type: SourceType,
    source_id: str,
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> list[ChunkDetail]:
    """Stored chunks of one entity, ordered by language then index."""
    return await indexing_service.get_chunk_details(source_type, source_id)


@router.post("/sync", response_model=SyncReport)
async def sync_all(
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> SyncReport:
    """
    Re-index every entity.

    Per-entity failures are reported in the body, not as an error status.
    """
    try:
        return await indexing_service.sync_all()
    except Exception as e:
        logger.exception(f"{__name__}:sync_all - {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Sync failed: {e}",
        )


@router.post("/sync-single", response_model=SyncOutcome)
async def sync_single(
    request: SyncSingleRequest,
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> SyncOutcome:
    """
    Re-index one entity.

    Raises:
        HTTPException(404): Entity not found (its stale chunks are removed)
        HTTPException(502): Embedding provider failure after retries
        HTTPException(500): Index write failure
    """
    try:
        return await indexing_service.sync_one(request.source_type, request.source_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except EmbeddingProviderError as e:
        logger.error(f"{__name__}:sync_single - {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    except IndexConsistencyError as e:
        logger.error(f"{__name__}:sync_single - {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.delete("", response_model=DeleteResponse)
async def clear_all(
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> DeleteResponse:
    """Delete every chunk in the index."""
    return DeleteResponse(deleted=await indexing_service.clear_all())


@router.delete("/{source_type}/{source_id}", response_model=DeleteResponse)
async def clear_one(
    source_type: SourceType,
    source_id: str,
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> DeleteResponse:
    """Delete every chunk of one entity."""
    return DeleteResponse(deleted=await indexing_service.clear_one(source_type, source_id))
