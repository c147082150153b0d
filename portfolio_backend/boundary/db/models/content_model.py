"""
Portfolio content ORM models.

Projects, blog posts, the profile and work experience, each with per-language
translation rows. These tables are edited by the admin CMS; the indexing and
chat layers only read them.

Dependencies: sqlalchemy, portfolio_backend.boundary.db.base
System role: Content entities that feed the embedding index
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_backend.boundary.db.base import Base, TimestampMixin, UUIDMixin

project_technologies = Table(
    "project_technologies",
    Base.metadata,
    Column("project_id", ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class SkillModel(Base, UUIDMixin):
    """Skill or technology name that projects link to."""

    __tablename__ = "skills"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class ProjectModel(Base, UUIDMixin, TimestampMixin):
    """
    Portfolio project.

    Attributes:
        slug: URL path segment, unique
        status: Free-form lifecycle label (completed, in-progress, ...)
        category: Optional category name
        github / live_demo: Optional external links
        cover_image: Optional image URL shown on source cards
        translations: Per-language title and descriptions
        technologies: Linked skills
    """

    __tablename__ = "projects"

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="completed")
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    github: Mapped[str | None] = mapped_column(String(500), nullable=True)
    live_demo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    translations = relationship(
        "ProjectTranslationModel",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    technologies = relationship(
        "SkillModel",
        secondary=project_technologies,
        lazy="selectin",
    )


class ProjectTranslationModel(Base, UUIDMixin):
    """Localized project text."""

    __tablename__ = "project_translations"
    __table_args__ = (UniqueConstraint("project_id", "language"),)

    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    short_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    full_description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    project = relationship("ProjectModel", back_populates="translations")


class BlogPostModel(Base, UUIDMixin, TimestampMixin):
    """Blog post with tags stored as a JSON array."""

    __tablename__ = "blog_posts"

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="published")

    translations = relationship(
        "BlogPostTranslationModel",
        back_populates="post",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class BlogPostTranslationModel(Base, UUIDMixin):
    """Localized blog post text."""

    __tablename__ = "blog_post_translations"
    __table_args__ = (UniqueConstraint("post_id", "language"),)

    post_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("blog_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    post = relationship("BlogPostModel", back_populates="translations")


class ProfileModel(Base, UUIDMixin, TimestampMixin):
    """Site owner profile and contact links."""

    __tablename__ = "profiles"

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github: Mapped[str | None] = mapped_column(String(500), nullable=True)
    linkedin: Mapped[str | None] = mapped_column(String(500), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)

    translations = relationship(
        "ProfileTranslationModel",
        back_populates="profile",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ProfileTranslationModel(Base, UUIDMixin):
    """Localized profile text."""

    __tablename__ = "profile_translations"
    __table_args__ = (UniqueConstraint("profile_id", "language"),)

    profile_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    about_description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    profile = relationship("ProfileModel", back_populates="translations")


class WorkExperienceModel(Base, UUIDMixin, TimestampMixin):
    """Employment history entry; end_date None means current position."""

    __tablename__ = "work_experiences"

    company: Mapped[str] = mapped_column(String(255), nullable=False)
    logo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    translations = relationship(
        "WorkExperienceTranslationModel",
        back_populates="experience",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class WorkExperienceTranslationModel(Base, UUIDMixin):
    """Localized work experience text."""

    __tablename__ = "work_experience_translations"
    __table_args__ = (UniqueConstraint("experience_id", "language"),)

    experience_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("work_experiences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    experience = relationship("WorkExperienceModel", back_populates="translations")
