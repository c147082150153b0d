"""
Chat ORM models.

Sessions keyed by caller address, the append-only message log, and the
per-day request counters used for rate limiting.

Dependencies: sqlalchemy, portfolio_backend.boundary.db.base
System role: Chat transcript and quota persistence
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_backend.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now


class MessageRole(str, enum.Enum):
    """Speaker of a persisted chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    One conversational continuity window for one caller.

    updated_at is touched on every message; a caller whose latest session
    has been idle longer than the configured window gets a new one.

    Attributes:
        caller_address: Network address of the caller
        messages: Persisted transcript (cascading delete)
    """

    __tablename__ = "ai_chat_sessions"

    caller_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    messages = relationship(
        "ChatMessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessageModel.created_at",
    )


class ChatMessageModel(Base, UUIDMixin):
    """
    Append-only chat message.

    Attributes:
        session_id: Parent session
        role: user or assistant
        content: Message text
        message_metadata: Assistant only; prompt, token usage and shown source URLs
        created_at: Insert time (UTC)
    """

    __tablename__ = "ai_chat_messages"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("ai_chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[MessageRole] = mapped_column(
        Enum(
            MessageRole,
            native_enum=False,
            length=16,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    session = relationship("ChatSessionModel", back_populates="messages")


class RateLimitModel(Base, UUIDMixin, TimestampMixin):
    """
    Daily request counter per caller.

    Constraints:
        (caller_address, day): UNIQUE, target of the atomic increment upsert
    """

    __tablename__ = "chat_rate_limits"
    __table_args__ = (
        UniqueConstraint("caller_address", "day", name="uq_chat_rate_limits_caller_day"),
    )

    caller_address: Mapped[str] = mapped_column(String(64), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
