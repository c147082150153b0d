"""
Chat session controller.

Per-caller daily quota, session continuity across requests, history
trimming and the persisted message log.

Dependencies: portfolio_backend.boundary.db.CRUD, portfolio_backend.configs
System role: Chat session and quota use cases
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.boundary.db.base import as_utc, utc_now
from portfolio_backend.boundary.db.CRUD.chat_crud import (
    chat_message_crud,
    chat_session_crud,
    rate_limit_crud,
)
from portfolio_backend.boundary.db.models.chat_model import ChatSessionModel, MessageRole
from portfolio_backend.configs.chat import ChatSettings
from portfolio_backend.core.exceptions import QuotaExceededError
from portfolio_backend.models.chat import HistoryTurn

logger = logging.getLogger(__name__)


class ChatSessionController:
    """Quota, session and message-log operations for one request."""

    def __init__(
        self,
        db: AsyncSession,
        settings: ChatSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize controller.

        Args:
            db: Async SQLAlchemy session
            settings: Chat settings (limits and windows)
            clock: Source of the current UTC time
        """
        self.db = db
        self.settings = settings or ChatSettings()
        self.clock = clock

    async def enforce_quota(self, caller_address: str, is_privileged: bool = False) -> int | None:
        """
        Count this request against the caller's daily quota.

        The counter is read first so exhausted callers are rejected without
        a write, then incremented atomically; a concurrent request that
        pushes the counter past the limit is rejected as well.

        Args:
            caller_address: Network address of the caller
            is_privileged: Site owner; bypasses the quota entirely

        Returns:
            Counter value after this request, None for privileged callers

        Raises:
            QuotaExceededError: If the caller already used today's requests
        """
        if is_privileged:
            return None

        now = self.clock()
        day = now.date()
        limit = self.settings.daily_request_limit

        current = await rate_limit_crud.get_count(self.db, caller_address, day)
        if current >= limit:
            logger.info(f"{__name__}:enforce_quota - Rejected {caller_address} count={current}")
            raise QuotaExceededError(caller_address, limit)

        count = await rate_limit_crud.increment(self.db, caller_address, day, now=now)
        if count > limit:
            logger.info(f"{__name__}:enforce_quota - Rejected {caller_address} after race count={count}")
            raise QuotaExceededError(caller_address, limit)
        return count

    async def resolve_session(self, caller_address: str) -> tuple[ChatSessionModel, bool]:
        """
        Session for this request.

        Reuses the caller's latest session while it was active within the
        inactivity window (and marks it active now), otherwise starts one.

        Returns:
            (session, True when newly created)
        """
        now = self.clock()
        window = timedelta(minutes=self.settings.session_timeout_minutes)

        latest = await chat_session_crud.get_latest_for_caller(self.db, caller_address)
        if latest is not None and now - as_utc(latest.updated_at) <= window:
            await chat_session_crud.touch(self.db, latest, now)
            return latest, False

        chat_session = await chat_session_crud.start(self.db, caller_address, now)
        logger.info(f"{__name__}:resolve_session - New session {chat_session.id} for {caller_address}")
        return chat_session, True

    def trim_history(self, turns: Sequence[HistoryTurn]) -> list[HistoryTurn]:
        """Keep the most recent turns, up to the configured limit."""
        limit = self.settings.history_limit
        if limit <= 0:
            return []
        return list(turns[-limit:])

    async def record_user_message(self, session_id: UUID, content: str) -> None:
        await chat_message_crud.add_message(
            self.db, session_id, MessageRole.USER, content, created_at=self.clock()
        )

    async def record_assistant_message(
        self,
        session_id: UUID,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await chat_message_crud.add_message(
            self.db, session_id, MessageRole.ASSISTANT, content, metadata=metadata, created_at=self.clock()
        )

    async def shown_source_urls(self, session_id: UUID) -> set[str]:
        """URLs already shown as source cards in this session."""
        return await chat_message_crud.get_shown_source_urls(self.db, session_id)
