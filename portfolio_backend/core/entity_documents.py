"""
Index document rendering for content entities.

Each entity type is rendered per language into one plain-text document:
a single header line of labelled fields followed by description and body.
The header carries the fields a visitor is likely to search for (title,
slug, technologies, company), so every chunk's embedding sees them at least
once.

Dependencies: portfolio_backend.models.embedding
System role: Text source for the indexing pipeline
"""

from datetime import datetime
from typing import Any, Callable

from portfolio_backend.models.embedding import SourceType

DEFAULT_LANGUAGE = "en"


def pick_translation(entity: Any, language: str, fallback: bool = True) -> Any | None:
    """
    Translation of an entity for a language.

    Args:
        entity: Content ORM entity with a `translations` collection
        language: Requested language code
        fallback: Fall back to English, then to any translation

    Returns:
        Matching translation, None when nothing qualifies
    """
    translations = list(getattr(entity, "translations", None) or [])
    for translation in translations:
        if translation.language == language:
            return translation
    if not fallback or not translations:
        return None
    for translation in translations:
        if translation.language == DEFAULT_LANGUAGE:
            return translation
    return sorted(translations, key=lambda t: t.language)[0]


def format_period(start_date: datetime | None, end_date: datetime | None) -> str:
    """Year range of a work experience, open ended as Present."""
    start = str(start_date.year) if start_date else ""
    end = str(end_date.year) if end_date else "Present"
    return f"{start} - {end}".strip()


def _header(source_type: SourceType, fields: list[tuple[str, Any]]) -> str:
    parts = [f"{label}: {value}" for label, value in fields if value]
    return f"[{source_type.value}] " + " | ".join(parts)


def _document(header: str, description: str | None, content: str | None) -> str:
    return f"{header}\nDescription: {description or ''}\nContent: {content or ''}"


def render_project(project: Any, language: str) -> str | None:
    translation = pick_translation(project, language, fallback=False)
    if translation is None:
        return None
    technologies = ", ".join(skill.name for skill in project.technologies or [])
    header = _header(
        SourceType.PROJECT,
        [
            ("Title", translation.title),
            ("Slug", project.slug),
            ("Category", project.category),
            ("Status", project.status),
            ("Technologies", technologies),
            ("GitHub", project.github),
            ("Live Demo", project.live_demo),
        ],
    )
    return _document(header, translation.short_description, translation.full_description)


def render_blog_post(post: Any, language: str) -> str | None:
    translation = pick_translation(post, language, fallback=False)
    if translation is None:
        return None
    header = _header(
        SourceType.BLOG,
        [
            ("Title", translation.title),
            ("Slug", post.slug),
            ("Category", post.category),
            ("Tags", ", ".join(post.tags or [])),
        ],
    )
    return _document(header, translation.description, translation.content)


def render_profile(profile: Any, language: str) -> str | None:
    translation = pick_translation(profile, language, fallback=False)
    if translation is None:
        return None
    header = _header(
        SourceType.PROFILE,
        [
            ("Name", translation.name),
            ("Title", translation.title),
            ("Email", profile.email),
            ("GitHub", profile.github),
            ("LinkedIn", profile.linkedin),
        ],
    )
    return _document(header, translation.title, translation.about_description)


def render_experience(experience: Any, language: str) -> str | None:
    translation = pick_translation(experience, language, fallback=False)
    if translation is None:
        return None
    header = _header(
        SourceType.EXPERIENCE,
        [
            ("Company", experience.company),
            ("Role", translation.role),
            ("Location Type", translation.location_type),
            ("Period", format_period(experience.start_date, experience.end_date)),
        ],
    )
    return _document(header, translation.location_type, translation.description)


RENDERERS: dict[SourceType, Callable[[Any, str], str | None]] = {
    SourceType.PROJECT: render_project,
    SourceType.BLOG: render_blog_post,
    SourceType.PROFILE: render_profile,
    SourceType.EXPERIENCE: render_experience,
}


def render_index_document(source_type: SourceType, entity: Any, language: str) -> str | None:
    """
    Render the text that gets chunked and embedded for one language.

    Args:
        source_type: Entity type
        entity: Content ORM entity with translations loaded
        language: Language code

    Returns:
        Document text, None when the entity has no translation in that language
    """
    return RENDERERS[SourceType(source_type)](entity, language)


def entity_title(source_type: SourceType, entity: Any) -> str:
    """Display title for admin views, English preferred."""
    translation = pick_translation(entity, DEFAULT_LANGUAGE)
    source_type = SourceType(source_type)
    if source_type == SourceType.PROFILE:
        return translation.name if translation else "Profile"
    if source_type == SourceType.EXPERIENCE:
        if translation:
            return f"{entity.company} - {translation.role}"
        return entity.company
    if translation:
        return translation.title
    return entity.slug
