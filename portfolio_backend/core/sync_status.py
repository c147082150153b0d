"""
Sync status derivation.

Pure comparison of an entity's last modification time with the write times
of its chunks, per language and overall.

Dependencies: portfolio_backend.models.embedding
System role: Freshness rules behind the admin embeddings dashboard
"""

from datetime import datetime, timedelta
from typing import Iterable, Mapping

from portfolio_backend.models.embedding import LanguageStatus, StatusReportItem, SyncStatus

STATUS_ORDER = {
    SyncStatus.MISSING: 0,
    SyncStatus.OUTDATED: 1,
    SyncStatus.SYNCED: 2,
}


def derive_language_status(
    entity_updated_at: datetime,
    chunk_count: int,
    last_indexed_at: datetime | None,
    tolerance_seconds: float = 5.0,
) -> SyncStatus:
    """
    Status of a single language.

    Args:
        entity_updated_at: Entity modification time (UTC)
        chunk_count: Chunks stored for the language
        last_indexed_at: Newest chunk write for the language (UTC)
        tolerance_seconds: Clock slack allowed between entity save and indexing

    Returns:
        SyncStatus for the language
    """
    if chunk_count == 0 or last_indexed_at is None:
        return SyncStatus.MISSING
    if entity_updated_at > last_indexed_at + timedelta(seconds=tolerance_seconds):
        return SyncStatus.OUTDATED
    return SyncStatus.SYNCED


def derive_entity_status(
    entity_updated_at: datetime,
    translated_languages: Iterable[str],
    freshness: Mapping[str, tuple[int, datetime]],
    tolerance_seconds: float = 5.0,
) -> tuple[SyncStatus, list[LanguageStatus]]:
    """
    Overall and per-language status of an entity.

    An entity with no chunks at all is missing. It is outdated when any
    indexed language is stale, or when a translated language has no chunks
    while other languages do. Otherwise it is synced.

    Args:
        entity_updated_at: Entity modification time (UTC)
        translated_languages: Supported languages the entity has translations for
        freshness: language -> (chunk_count, last_indexed_at) from the index
        tolerance_seconds: Clock slack allowed between entity save and indexing

    Returns:
        (overall status, per-language statuses sorted by language)
    """
    languages = sorted(set(translated_languages) | set(freshness))
    statuses = []
    for language in languages:
        chunk_count, last_indexed_at = freshness.get(language, (0, None))
        statuses.append(
            LanguageStatus(
                language=language,
                status=derive_language_status(
                    entity_updated_at, chunk_count, last_indexed_at, tolerance_seconds
                ),
                chunk_count=chunk_count,
                last_indexed_at=last_indexed_at,
            )
        )

    if not any(status.chunk_count for status in statuses):
        return SyncStatus.MISSING, statuses
    if any(status.status != SyncStatus.SYNCED for status in statuses):
        return SyncStatus.OUTDATED, statuses
    return SyncStatus.SYNCED, statuses


def sort_status_report(items: Iterable[StatusReportItem]) -> list[StatusReportItem]:
    """Missing first, then outdated, then synced; newest edits first within each."""
    by_recency = sorted(items, key=lambda item: item.updated_at, reverse=True)
    return sorted(by_recency, key=lambda item: STATUS_ORDER[item.status])
