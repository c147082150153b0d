"""
Context fusion.

Turns ranked similarity hits into (a) labelled context blocks for the prompt
and (b) display source cards. Entities are loaded in one batched query per
type; each type registers how it renders a block and, when it has a public
page, how it becomes a source card.

Dependencies: portfolio_backend.boundary.db.CRUD, portfolio_backend.core.entity_documents
System role: Retrieval-to-prompt assembly
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.CRUD.content_crud import get_content_crud
from portfolio_backend.core.entity_documents import format_period, pick_translation
from portfolio_backend.models.chat import SourceItem
from portfolio_backend.models.embedding import SimilarityHit, SourceType

logger = logging.getLogger(__name__)

EntityKey = tuple[SourceType, str]


def _block(source_type: SourceType, fields: list[tuple[str, Any]]) -> str:
    lines = [f"--- SOURCE: {source_type.value} ---"]
    lines.extend(f"{label}: {value}" for label, value in fields if value)
    return "\n".join(lines)


def project_url(project: Any, language: str) -> str:
    return f"/{language}/projects/{project.slug}"


def blog_url(post: Any, language: str) -> str:
    return f"/{language}/blog/{post.slug}"


def _project_block(project: Any, language: str) -> str:
    translation = pick_translation(project, language)
    return _block(
        SourceType.PROJECT,
        [
            ("TITLE", translation.title if translation else project.slug),
            ("DESCRIPTION", translation.short_description if translation else ""),
            ("URL", project_url(project, language)),
            ("GITHUB", project.github),
            ("LIVE DEMO", project.live_demo),
            ("CATEGORY", project.category),
            ("STATUS", project.status),
            ("TECHNOLOGIES", ", ".join(skill.name for skill in project.technologies or [])),
        ],
    )


def _project_source(project: Any, language: str, similarity: float) -> SourceItem:
    translation = pick_translation(project, language)
    return SourceItem(
        source_type=SourceType.PROJECT,
        title=translation.title if translation else project.slug,
        description=translation.short_description if translation else "",
        url=project_url(project, language),
        image_url=project.cover_image,
        github=project.github,
        live_demo=project.live_demo,
        category=project.category,
        technologies=[skill.name for skill in project.technologies or []],
        similarity=similarity,
    )


def _blog_block(post: Any, language: str) -> str:
    translation = pick_translation(post, language)
    return _block(
        SourceType.BLOG,
        [
            ("TITLE", translation.title if translation else post.slug),
            ("DESCRIPTION", translation.description if translation else ""),
            ("URL", blog_url(post, language)),
            ("CATEGORY", post.category),
            ("TAGS", ", ".join(post.tags or [])),
        ],
    )


def _blog_source(post: Any, language: str, similarity: float) -> SourceItem:
    translation = pick_translation(post, language)
    return SourceItem(
        source_type=SourceType.BLOG,
        title=translation.title if translation else post.slug,
        description=translation.description if translation else "",
        url=blog_url(post, language),
        image_url=post.cover_image,
        category=post.category,
        tags=list(post.tags or []),
        similarity=similarity,
    )


def _profile_block(profile: Any, language: str) -> str:
    translation = pick_translation(profile, language)
    return _block(
        SourceType.PROFILE,
        [
            ("NAME", translation.name if translation else ""),
            ("TITLE", translation.title if translation else ""),
            ("DESCRIPTION", translation.about_description if translation else ""),
            ("URL", f"/{language}"),
            ("EMAIL", profile.email),
            ("GITHUB", profile.github),
            ("LINKEDIN", profile.linkedin),
        ],
    )


def _experience_block(experience: Any, language: str) -> str:
    translation = pick_translation(experience, language)
    return _block(
        SourceType.EXPERIENCE,
        [
            ("COMPANY", experience.company),
            ("TITLE", translation.role if translation else ""),
            ("LOCATION TYPE", translation.location_type if translation else ""),
            ("PERIOD", format_period(experience.start_date, experience.end_date)),
            ("DESCRIPTION", translation.description if translation else ""),
            ("URL", f"/{language}/work"),
        ],
    )


@dataclass(frozen=True)
class ContentAdapter:
    """How one entity type takes part in fusion."""

    render_block: Callable[[Any, str], str]
    to_source: Callable[[Any, str, float], SourceItem] | None = None


ADAPTERS: dict[SourceType, ContentAdapter] = {
    SourceType.PROJECT: ContentAdapter(render_block=_project_block, to_source=_project_source),
    SourceType.BLOG: ContentAdapter(render_block=_blog_block, to_source=_blog_source),
    SourceType.PROFILE: ContentAdapter(render_block=_profile_block),
    SourceType.EXPERIENCE: ContentAdapter(render_block=_experience_block),
}


@dataclass
class FusedContext:
    """Prompt blocks and source cards in relevance order."""

    blocks: list[str] = field(default_factory=list)
    sources: list[SourceItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.blocks


class ContextFusion:
    """Resolve retrieved entities and project them for the prompt and the UI."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize fusion.

        Args:
            db: Async database session
        """
        self.db = db

    async def _load_entities(self, keys: Iterable[EntityKey]) -> dict[EntityKey, Any]:
        """Batch-load entities, one query per type, in type order."""
        ids_by_type: dict[SourceType, list[str]] = {}
        for source_type, source_id in keys:
            ids_by_type.setdefault(source_type, []).append(source_id)

        entities: dict[EntityKey, Any] = {}
        for source_type in SourceType:
            source_ids = ids_by_type.get(source_type)
            if not source_ids:
                continue
            loaded = await get_content_crud(source_type).list_by_source_ids(self.db, source_ids)
            for source_id, entity in loaded.items():
                entities[(source_type, source_id)] = entity
        return entities

    async def fuse(self, hits: list[SimilarityHit], language: str) -> FusedContext:
        """
        Build context blocks and source cards from ranked hits.

        Entities appear in the order of their best-ranked hit. A source card
        carries the best similarity among the entity's hits. Entities deleted
        since indexing are skipped.

        Args:
            hits: Hits ordered by relevance
            language: Display language for translations and URLs

        Returns:
            FusedContext with one block per entity
        """
        order: list[EntityKey] = []
        best: dict[EntityKey, float] = {}
        for hit in hits:
            key = (hit.source_type, hit.source_id)
            if key not in best:
                order.append(key)
                best[key] = hit.similarity
            else:
                best[key] = max(best[key], hit.similarity)

        entities = await self._load_entities(order)
        fused = FusedContext()
        for key in order:
            entity = entities.get(key)
            if entity is None:
                logger.warning(f"{__name__}:fuse - Skipping stale hit {key[0].value}/{key[1]}")
                continue
            adapter = ADAPTERS[key[0]]
            fused.blocks.append(adapter.render_block(entity, language))
            if adapter.to_source is not None:
                fused.sources.append(adapter.to_source(entity, language, best[key]))

        logger.info(
            f"{__name__}:fuse - entities={len(order)}, blocks={len(fused.blocks)}, sources={len(fused.sources)}"
        )
        return fused

    async def build_sources(
        self,
        keys: list[tuple[SourceType, str, float | None]],
        language: str,
    ) -> list[SourceItem]:
        """
        Source cards for already ranked entities (related content).

        Args:
            keys: (source_type, source_id, similarity) in display order
            language: Display language

        Returns:
            Cards for the entities that exist and have a public page
        """
        entities = await self._load_entities((source_type, source_id) for source_type, source_id, _ in keys)
        sources = []
        for source_type, source_id, similarity in keys:
            entity = entities.get((source_type, source_id))
            adapter = ADAPTERS[source_type]
            if entity is None or adapter.to_source is None:
                continue
            sources.append(adapter.to_source(entity, language, similarity or 0.0))
        return sources
