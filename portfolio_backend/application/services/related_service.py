"""
Related content service.

Finds entities of the same type that sit close to a given entity in
embedding space and returns them as display cards.

Dependencies: portfolio_backend.core.retriever, portfolio_backend.core.context_fusion
System role: "You might also like" use case
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.CRUD.content_crud import get_content_crud
from portfolio_backend.core.context_fusion import ContextFusion
from portfolio_backend.core.exceptions import EntityNotFoundError, ValidationError
from portfolio_backend.core.retriever import SimilaritySearch
from portfolio_backend.models.chat import SourceItem
from portfolio_backend.models.embedding import SourceType

logger = logging.getLogger(__name__)

RELATED_TYPES = {SourceType.PROJECT, SourceType.BLOG}


class RelatedContentService:
    """Related projects and blog posts."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.search = SimilaritySearch(db)
        self.fusion = ContextFusion(db)

    async def get_related(
        self,
        source_type: SourceType,
        source_id: str,
        language: str,
        limit: int = 3,
    ) -> list[SourceItem]:
        """
        Related items for an entity page.

        Raises:
            ValidationError: If the type has no public pages
            EntityNotFoundError: If the anchor entity does not exist
        """
        source_type = SourceType(source_type)
        if source_type not in RELATED_TYPES:
            raise ValidationError(
                f"Related content is not available for {source_type.value}",
                field="source_type",
            )
        if await get_content_crud(source_type).get_by_source_id(self.db, source_id) is None:
            raise EntityNotFoundError(source_type.value, source_id)

        similar = await self.search.find_similar_entities(source_type, source_id, language, k=limit)
        items = await self.fusion.build_sources(
            [(entity.source_type, entity.source_id, entity.similarity) for entity in similar],
            language,
        )
        logger.info(f"{__name__}:get_related - {source_type.value}/{source_id} items={len(items)}")
        return items
