"""
Chat persistence CRUD operations.

Session lookup per caller, the append-only message log and the daily
request counters.

Dependencies: sqlalchemy, portfolio_backend.boundary.db.models
System role: Chat transcript and quota persistence operations
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.base import utc_now
from portfolio_backend.boundary.db.CRUD.base_crud import BaseCRUD
from portfolio_backend.boundary.db.models.chat_model import (
    ChatMessageModel,
    ChatSessionModel,
    MessageRole,
    RateLimitModel,
)


class ChatSessionCRUD(BaseCRUD[ChatSessionModel]):
    """CRUD operations for ChatSessionModel."""

    def __init__(self) -> None:
        """Initialize ChatSessionCRUD with ChatSessionModel."""
        super().__init__(ChatSessionModel)

    async def get_latest_for_caller(
        self,
        session: AsyncSession,
        caller_address: str,
    ) -> ChatSessionModel | None:
        """
        Most recently active session of a caller.

        Args:
            session: Async database session
            caller_address: Network address of the caller

        Returns:
            Session with the newest updated_at, None if the caller never chatted
        """
        stmt = (
            select(ChatSessionModel)
            .where(ChatSessionModel.caller_address == caller_address)
            .order_by(ChatSessionModel.updated_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def start(self, session: AsyncSession, caller_address: str, now: datetime) -> ChatSessionModel:
        """Create a new session for a caller, stamped with now."""
        return await self.create(
            session,
            caller_address=caller_address,
            created_at=now,
            updated_at=now,
        )

    async def touch(self, session: AsyncSession, chat_session: ChatSessionModel, now: datetime) -> None:
        """
        Mark a session active at now.

        Goes through the ORM instance rather than a bulk UPDATE so the copy
        held in the identity map stays current.
        """
        chat_session.updated_at = now
        await session.flush()


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel (append-only)."""

    def __init__(self) -> None:
        """Initialize ChatMessageCRUD with ChatMessageModel."""
        super().__init__(ChatMessageModel)

    async def add_message(
        self,
        session: AsyncSession,
        session_id: UUID,
        role: MessageRole,
        content: str,
        metadata: dict[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> ChatMessageModel:
        """
        Append a message to a session's log.

        Args:
            session: Async database session
            session_id: Parent chat session
            role: Speaker
            content: Message text
            metadata: Optional JSON metadata (assistant messages)
            created_at: Insert time (defaults to now)

        Returns:
            Persisted message
        """
        return await self.create(
            session,
            session_id=session_id,
            role=role,
            content=content,
            message_metadata=metadata,
            created_at=created_at or utc_now(),
        )

    async def get_messages(self, session: AsyncSession, session_id: UUID) -> list[ChatMessageModel]:
        """Messages of a session in insertion order."""
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.created_at)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_shown_source_urls(self, session: AsyncSession, session_id: UUID) -> set[str]:
        """URLs of source cards already returned earlier in a session."""
        stmt = select(ChatMessageModel.message_metadata).where(
            ChatMessageModel.session_id == session_id,
            ChatMessageModel.role == MessageRole.ASSISTANT,
        )
        result = await session.execute(stmt)
        shown: set[str] = set()
        for metadata in result.scalars().all():
            if metadata:
                shown.update(metadata.get("sources") or [])
        return shown


class RateLimitCRUD(BaseCRUD[RateLimitModel]):
    """CRUD operations for RateLimitModel."""

    def __init__(self) -> None:
        """Initialize RateLimitCRUD with RateLimitModel."""
        super().__init__(RateLimitModel)

    async def get_count(self, session: AsyncSession, caller_address: str, day: date) -> int:
        """Requests recorded for a caller on a day (0 when none)."""
        stmt = select(RateLimitModel.request_count).where(
            RateLimitModel.caller_address == caller_address,
            RateLimitModel.day == day,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def increment(
        self,
        session: AsyncSession,
        caller_address: str,
        day: date,
        now: datetime | None = None,
    ) -> int:
        """
        Atomically create or increment a caller's counter for a day.

        Uses INSERT ... ON CONFLICT DO UPDATE ... RETURNING so concurrent
        requests from the same caller never lose an increment.

        Args:
            session: Async database session
            caller_address: Network address of the caller
            day: Calendar day (UTC)
            now: Timestamp for the row (defaults to now)

        Returns:
            Counter value after this request
        """
        now = now or utc_now()
        dialect = session.get_bind().dialect.name
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert

        stmt = insert(RateLimitModel).values(
            caller_address=caller_address,
            day=day,
            request_count=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["caller_address", "day"],
            set_={
                "request_count": RateLimitModel.request_count + 1,
                "updated_at": now,
            },
        ).returning(RateLimitModel.request_count)

        result = await session.execute(stmt)
        return int(result.scalar_one())


chat_session_crud = ChatSessionCRUD()
chat_message_crud = ChatMessageCRUD()
rate_limit_crud = RateLimitCRUD()
