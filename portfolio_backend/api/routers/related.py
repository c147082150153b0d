"""Related content endpoints.

Routes:
- GET /related/{source_type}/{source_id} - Similar projects or blog posts

Dependencies: portfolio_backend.application.services.related_service
System role: Content page recommendations HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from portfolio_backend.api.deps import get_related_content_service, get_settings_dependency
from portfolio_backend.application.services.chat_service import normalize_language
from portfolio_backend.application.services.related_service import RelatedContentService
from portfolio_backend.configs import Settings
from portfolio_backend.core.exceptions import EntityNotFoundError, ValidationError
from portfolio_backend.models.chat import RelatedResponse
from portfolio_backend.models.embedding import SourceType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/related", tags=["related"])


@router.get("/{source_type}/{source_id}", response_model=RelatedResponse)
async def get_related(
    source_type: SourceType,
    source_id: str,
    locale: str = Query(default="en"),
    limit: int = Query(default=3, ge=1, le=12),
    related_service: RelatedContentService = Depends(get_related_content_service),
    settings: Settings = Depends(get_settings_dependency),
) -> RelatedResponse:
    """
    Items similar to an entity, falling back to the most recent ones.

    Raises:
        HTTPException(400): Type without public pages
        HTTPException(404): Entity not found
    """
    language = normalize_language(
        locale,
        settings.embeddings.languages,
        settings.embeddings.default_language,
    )
    try:
        items = await related_service.get_related(source_type, source_id, language, limit)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return RelatedResponse(items=items)
