"""
Content entity CRUD operations.

Read-side queries over projects, blog posts, the profile and work experience.
Entity ids travel through the index as strings, so lookups accept the string
form and treat malformed ids as unknown.

Dependencies: sqlalchemy, portfolio_backend.boundary.db.models
System role: Content lookups for indexing, fusion and related content
"""

import uuid
from typing import Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.CRUD.base_crud import BaseCRUD
from portfolio_backend.boundary.db.models.content_model import (
    BlogPostModel,
    ProfileModel,
    ProjectModel,
    WorkExperienceModel,
)
from portfolio_backend.models.embedding import SourceType

ContentT = TypeVar("ContentT", ProjectModel, BlogPostModel, ProfileModel, WorkExperienceModel)


def parse_entity_id(source_id: str) -> uuid.UUID | None:
    """Parse a string entity id, None when it is not a UUID."""
    try:
        return uuid.UUID(str(source_id))
    except ValueError:
        return None


class ContentCRUD(BaseCRUD[ContentT]):
    """
    Read operations shared by all content entity types.

    Translations (and project technologies) are loaded eagerly through the
    models' selectin relationships.
    """

    def __init__(self, model: type[ContentT], source_type: SourceType) -> None:
        """
        Initialize ContentCRUD for one entity type.

        Args:
            model: Content ORM model
            source_type: Index tag of the entity type
        """
        super().__init__(model)
        self.source_type = source_type

    async def get_by_source_id(self, session: AsyncSession, source_id: str) -> ContentT | None:
        """Entity by its string id, None when missing or malformed."""
        entity_id = parse_entity_id(source_id)
        if entity_id is None:
            return None
        return await self.get_by_id(session, entity_id)

    async def list_by_source_ids(
        self,
        session: AsyncSession,
        source_ids: Sequence[str],
    ) -> dict[str, ContentT]:
        """
        Batch-load entities in one query.

        Returns:
            Entities keyed by string id; unknown ids are absent
        """
        entity_ids = [entity_id for entity_id in map(parse_entity_id, source_ids) if entity_id]
        if not entity_ids:
            return {}
        stmt = select(self.model).where(self.model.id.in_(entity_ids))
        result = await session.execute(stmt)
        return {str(entity.id): entity for entity in result.scalars().all()}

    async def list_source_ids(self, session: AsyncSession) -> list[str]:
        """String ids of every entity of this type."""
        result = await session.execute(select(self.model.id))
        return [str(entity_id) for entity_id in result.scalars().all()]

    async def list_recent(
        self,
        session: AsyncSession,
        limit: int,
        exclude_source_id: str | None = None,
    ) -> Sequence[ContentT]:
        """Most recently created entities, optionally excluding one id."""
        stmt = select(self.model).order_by(self.model.created_at.desc()).limit(limit)
        excluded = parse_entity_id(exclude_source_id) if exclude_source_id else None
        if excluded is not None:
            stmt = stmt.where(self.model.id != excluded)
        result = await session.execute(stmt)
        return result.scalars().all()


project_crud = ContentCRUD(ProjectModel, SourceType.PROJECT)
blog_post_crud = ContentCRUD(BlogPostModel, SourceType.BLOG)
profile_crud = ContentCRUD(ProfileModel, SourceType.PROFILE)
work_experience_crud = ContentCRUD(WorkExperienceModel, SourceType.EXPERIENCE)

CONTENT_CRUDS: dict[SourceType, ContentCRUD] = {
    SourceType.PROJECT: project_crud,
    SourceType.BLOG: blog_post_crud,
    SourceType.PROFILE: profile_crud,
    SourceType.EXPERIENCE: work_experience_crud,
}


def get_content_crud(source_type: SourceType) -> ContentCRUD:
    """CRUD singleton for a source type."""
    return CONTENT_CRUDS[SourceType(source_type)]
