"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory database, session factory, embedding and model test
doubles, a controllable clock and content entity factories
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from portfolio_backend.boundary.llm.gemini_client import GenerationResult
from portfolio_backend.configs.chat import ChatSettings
from portfolio_backend.configs.embeddings import EmbeddingSettings
from portfolio_backend.core.exceptions import EmbeddingProviderError, ModelGenerationError

TEST_DIMENSION = 768


class FakeEmbedder:
    """Deterministic embedder that records calls and can fail on demand."""

    def __init__(
        self,
        dimension: int = TEST_DIMENSION,
        failures: int = 0,
        fail_when: Callable[[str], bool] | None = None,
    ) -> None:
        self.dimension = dimension
        self.failures = failures
        self.fail_when = fail_when
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.failures > 0:
            self.failures -= 1
            raise EmbeddingProviderError("Embedding call failed: transient")
        if self.fail_when is not None and self.fail_when(text):
            raise EmbeddingProviderError("Embedding call failed: permanent")
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [(digest[i % len(digest)] + 1) / 256.0 for i in range(self.dimension)]


class FakeLLM:
    """Chat model double returning queued responses and recording prompts."""

    def __init__(self, responses: list[str] | None = None, error: Exception | None = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        text = self.responses.pop(0) if self.responses else "Here is what I found."
        return GenerationResult(
            text=text,
            usage={"input_tokens": len(prompt), "output_tokens": len(text), "total_tokens": len(prompt) + len(text)},
        )


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine sharing one connection across sessions (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    import portfolio_backend.boundary.db.models  # noqa: F401
    from portfolio_backend.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """Session factory configured like the application one."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(test_session_factory):
    """
    Create a test database session.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with test_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def failing_llm() -> FakeLLM:
    return FakeLLM(error=ModelGenerationError("Generation failed: upstream 503"))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def embedding_settings() -> EmbeddingSettings:
    """Embedding settings with instant retries and sequential sync."""
    return EmbeddingSettings(
        max_chunk_length=200,
        max_attempts=3,
        retry_initial_wait_seconds=0,
        retry_max_wait_seconds=0,
        retry_jitter_seconds=0,
        sync_concurrency=1,
        languages=["en", "tr"],
        default_language="en",
    )


@pytest.fixture
def chat_settings() -> ChatSettings:
    return ChatSettings(
        daily_request_limit=20,
        session_timeout_minutes=120,
        history_limit=10,
        search_top_k=8,
        min_similarity=0.55,
        intent_routing_enabled=False,
    )


async def create_project(
    db,
    slug: str = "portfolio-site",
    title: str = "Portfolio Site",
    short_description: str = "Personal website with an AI assistant",
    full_description: str = "Built with Next.js and a retrieval-augmented chat backend.",
    languages: tuple[str, ...] = ("en",),
    technologies: tuple[str, ...] = (),
    **fields,
):
    """Insert and commit a project with translations."""
    from portfolio_backend.boundary.db.models import (
        ProjectModel,
        ProjectTranslationModel,
        SkillModel,
    )

    project = ProjectModel(slug=slug, **fields)
    project.translations = [
        ProjectTranslationModel(
            language=language,
            title=f"{title} ({language})" if language != "en" else title,
            short_description=short_description,
            full_description=full_description,
        )
        for language in languages
    ]
    project.technologies = [SkillModel(name=name) for name in technologies]
    db.add(project)
    await db.commit()
    return project


async def create_blog_post(
    db,
    slug: str = "hello-world",
    title: str = "Hello World",
    description: str = "First post",
    content: str = "Notes on starting a blog about backend engineering.",
    languages: tuple[str, ...] = ("en",),
    tags: list[str] | None = None,
    **fields,
):
    """Insert and commit a blog post with translations."""
    from portfolio_backend.boundary.db.models import BlogPostModel, BlogPostTranslationModel

    post = BlogPostModel(slug=slug, tags=tags or [], **fields)
    post.translations = [
        BlogPostTranslationModel(
            language=language,
            title=title,
            description=description,
            content=content,
        )
        for language in languages
    ]
    db.add(post)
    await db.commit()
    return post


async def create_profile(db, name: str = "Kadir", title: str = "Software Engineer", **fields):
    """Insert and commit the profile with an English translation."""
    from portfolio_backend.boundary.db.models import ProfileModel, ProfileTranslationModel

    profile = ProfileModel(**fields)
    profile.translations = [
        ProfileTranslationModel(
            language="en",
            name=name,
            title=title,
            about_description="Backend engineer who enjoys search and data systems.",
        )
    ]
    db.add(profile)
    await db.commit()
    return profile


async def create_experience(
    db,
    company: str = "Acme Corp",
    role: str = "Backend Developer",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Insert and commit a work experience with an English translation."""
    from portfolio_backend.boundary.db.models import (
        WorkExperienceModel,
        WorkExperienceTranslationModel,
    )

    experience = WorkExperienceModel(
        company=company,
        start_date=start_date or datetime(2021, 1, 1, tzinfo=timezone.utc),
        end_date=end_date,
    )
    experience.translations = [
        WorkExperienceTranslationModel(
            language="en",
            role=role,
            description="Built and operated Python services.",
            location_type="Remote",
        )
    ]
    db.add(experience)
    await db.commit()
    return experience


@pytest.fixture
def embedder_factory() -> type[FakeEmbedder]:
    return FakeEmbedder


@pytest.fixture
def llm_factory() -> type[FakeLLM]:
    return FakeLLM


@pytest.fixture
def make_project():
    return create_project


@pytest.fixture
def make_blog_post():
    return create_blog_post


@pytest.fixture
def make_profile():
    return create_profile


@pytest.fixture
def make_experience():
    return create_experience
