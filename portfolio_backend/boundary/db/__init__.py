"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin, UUIDMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management

Models and CRUD singletons are imported from their own subpackages.

Dependencies: sqlalchemy, asyncpg, pgvector, portfolio_backend.configs
System role: Database adapter for portfolio content, the chunk index and chat logs
"""

from portfolio_backend.boundary.db.base import Base, TimestampMixin, UUIDMixin
from portfolio_backend.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
]
