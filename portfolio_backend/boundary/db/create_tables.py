"""
Database table creation script.

Enables the pgvector extension and creates all tables defined in the ORM
models.

Dependencies: sqlalchemy, pgvector, portfolio_backend.configs
System role: Database schema initialization

Usage:
    python -m portfolio_backend.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy import text

from portfolio_backend.boundary.db.base import Base
from portfolio_backend.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from portfolio_backend.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables() -> None:
    """
    Create the vector extension and every registered table.

    Idempotent: CREATE EXTENSION IF NOT EXISTS plus CREATE TABLE IF NOT EXISTS
    for each model, so safe to run multiple times.

    Raises:
        SQLAlchemyError: If the connection fails or the role may not create extensions
    """
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all_tables - Tables created: {sorted(Base.metadata.tables)}")


async def drop_all_tables() -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning(f"{__name__}:drop_all_tables - All tables dropped")


if __name__ == "__main__":
    from portfolio_backend.observability.logger import configure_logging

    configure_logging()
    asyncio.run(create_all_tables())
