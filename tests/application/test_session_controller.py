"""
Test suite for ChatSessionController.

System role: Verification of quota and session continuity rules
"""

import pytest

from portfolio_backend.application.services.session_service import ChatSessionController
from portfolio_backend.core.exceptions import QuotaExceededError
from portfolio_backend.models.chat import HistoryTurn


@pytest.fixture
def controller(test_async_db, chat_settings, clock) -> ChatSessionController:
    return ChatSessionController(test_async_db, chat_settings, clock=clock)


class TestEnforceQuota:
    """Test suite for ChatSessionController.enforce_quota."""

    @pytest.mark.asyncio
    async def test_quota_should_allow_limit_then_reject(self, controller, test_async_db) -> None:
        # Arrange
        counts = [await controller.enforce_quota("203.0.113.7") for _ in range(20)]
        await test_async_db.commit()

        # Act / Assert
        with pytest.raises(QuotaExceededError) as exc_info:
            await controller.enforce_quota("203.0.113.7")
        assert counts == list(range(1, 21))
        assert exc_info.value.details["limit"] == 20

    @pytest.mark.asyncio
    async def test_quota_should_count_callers_separately(self, controller) -> None:
        # Act
        for _ in range(20):
            await controller.enforce_quota("203.0.113.7")

        # Assert
        assert await controller.enforce_quota("198.51.100.2") == 1

    @pytest.mark.asyncio
    async def test_quota_should_reset_on_next_day(self, controller, clock) -> None:
        # Arrange
        for _ in range(20):
            await controller.enforce_quota("203.0.113.7")
        clock.advance(days=1)

        # Act
        count = await controller.enforce_quota("203.0.113.7")

        # Assert
        assert count == 1

    @pytest.mark.asyncio
    async def test_quota_should_not_apply_to_privileged_callers(self, controller) -> None:
        # Act
        results = [await controller.enforce_quota("203.0.113.7", is_privileged=True) for _ in range(25)]

        # Assert
        assert set(results) == {None}
        assert await controller.enforce_quota("203.0.113.7") == 1


class TestResolveSession:
    """Test suite for ChatSessionController.resolve_session."""

    @pytest.mark.asyncio
    async def test_resolve_should_reuse_session_within_window(self, controller, clock) -> None:
        # Arrange
        first, first_is_new = await controller.resolve_session("203.0.113.7")
        clock.advance(hours=1, minutes=59)

        # Act
        second, second_is_new = await controller.resolve_session("203.0.113.7")

        # Assert
        assert first_is_new
        assert not second_is_new
        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_resolve_should_slide_window_on_activity(self, controller, clock) -> None:
        # Arrange
        first, _ = await controller.resolve_session("203.0.113.7")
        clock.advance(hours=1, minutes=30)
        await controller.resolve_session("203.0.113.7")
        clock.advance(hours=1, minutes=30)

        # Act
        third, is_new = await controller.resolve_session("203.0.113.7")

        # Assert
        assert not is_new
        assert third.id == first.id

    @pytest.mark.asyncio
    async def test_resolve_should_start_new_session_after_inactivity(self, controller, clock) -> None:
        # Arrange
        first, _ = await controller.resolve_session("203.0.113.7")
        clock.advance(hours=2, minutes=1)

        # Act
        second, is_new = await controller.resolve_session("203.0.113.7")

        # Assert
        assert is_new
        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_resolve_should_not_share_sessions_between_callers(self, controller) -> None:
        # Act
        first, _ = await controller.resolve_session("203.0.113.7")
        second, is_new = await controller.resolve_session("198.51.100.2")

        # Assert
        assert is_new
        assert second.id != first.id


class TestMessagesAndHistory:
    """Test suite for the message log helpers."""

    def test_trim_history_should_keep_most_recent_turns(self, controller) -> None:
        # Arrange
        turns = [HistoryTurn(role="user", content=str(i)) for i in range(15)]

        # Act
        trimmed = controller.trim_history(turns)

        # Assert
        assert [turn.content for turn in trimmed] == [str(i) for i in range(5, 15)]

    def test_trim_history_should_drop_everything_for_zero_limit(
        self, test_async_db, chat_settings, clock
    ) -> None:
        # Arrange
        settings = chat_settings.model_copy(update={"history_limit": 0})
        controller = ChatSessionController(test_async_db, settings, clock=clock)

        # Act / Assert
        assert controller.trim_history([HistoryTurn(role="user", content="hi")]) == []

    @pytest.mark.asyncio
    async def test_shown_source_urls_should_collect_assistant_sources(self, controller) -> None:
        # Arrange
        chat_session, _ = await controller.resolve_session("203.0.113.7")
        await controller.record_user_message(chat_session.id, "projects?")
        await controller.record_assistant_message(
            chat_session.id, "Two projects.", {"sources": ["/en/projects/a", "/en/projects/b"]}
        )
        await controller.record_assistant_message(chat_session.id, "No sources here.", {"sources": []})

        # Act
        shown = await controller.shown_source_urls(chat_session.id)

        # Assert
        assert shown == {"/en/projects/a", "/en/projects/b"}
