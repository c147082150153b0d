"""
Test suite for embedding index admin endpoints.

System role: Verification of index maintenance HTTP API
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from portfolio_backend.api.deps import get_indexing_service, get_settings_dependency
from portfolio_backend.api.routers.embeddings import router
from portfolio_backend.configs import Settings
from portfolio_backend.configs.auth import AuthSettings
from portfolio_backend.core.exceptions import EmbeddingProviderError, EntityNotFoundError
from portfolio_backend.models.embedding import (
    EmbeddingStats,
    SourceType,
    StatusReportItem,
    SyncOutcome,
    SyncReport,
    SyncStatus,
)

ADMIN_HEADERS = {"X-Admin-Token": "owner-secret"}
POST_ID = "9c8b7a6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"


@pytest.fixture
def indexing_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def client(indexing_service: AsyncMock) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_indexing_service] = lambda: indexing_service
    app.dependency_overrides[get_settings_dependency] = lambda: Settings(
        auth=AuthSettings(admin_token="owner-secret")
    )
    return TestClient(app)


class TestAdminGuard:
    """Test suite for admin token enforcement."""

    @pytest.mark.parametrize("headers", [{}, {"X-Admin-Token": "wrong"}, {"Authorization": "Bearer wrong"}])
    def test_routes_should_reject_missing_or_wrong_token(
        self, client: TestClient, indexing_service: AsyncMock, headers
    ) -> None:
        # Act
        response = client.post("/admin/embeddings/sync", headers=headers)

        # Assert
        assert response.status_code == 401
        indexing_service.sync_all.assert_not_awaited()

    def test_routes_should_stay_closed_without_configured_token(self, indexing_service: AsyncMock) -> None:
        # Arrange
        app = FastAPI()
        app.include_router(router)
        app.dependency_overrides[get_indexing_service] = lambda: indexing_service
        app.dependency_overrides[get_settings_dependency] = lambda: Settings(auth=AuthSettings(admin_token=None))

        # Act
        response = TestClient(app).get("/admin/embeddings", headers=ADMIN_HEADERS)

        # Assert
        assert response.status_code == 401


class TestAdminRoutes:
    """Test suite for the admin operations."""

    def test_stats_should_return_totals(self, client: TestClient, indexing_service: AsyncMock) -> None:
        # Arrange
        indexing_service.get_stats.return_value = EmbeddingStats(
            total=3, by_source_type={"project": 2, "blog": 1, "profile": 0, "experience": 0}
        )

        # Act
        response = client.get("/admin/embeddings", headers={"Authorization": "Bearer owner-secret"})

        # Assert
        assert response.status_code == 200
        assert response.json()["total"] == 3

    def test_items_should_filter_by_source_type(self, client: TestClient, indexing_service: AsyncMock) -> None:
        # Arrange
        indexing_service.get_status_report.return_value = [
            StatusReportItem(
                source_type=SourceType.BLOG,
                source_id=POST_ID,
                title="Hello World",
                status=SyncStatus.MISSING,
                updated_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
            )
        ]

        # Act
        response = client.get("/admin/embeddings/items?source_type=blog", headers=ADMIN_HEADERS)

        # Assert
        assert response.status_code == 200
        assert response.json()[0]["status"] == "missing"
        indexing_service.get_status_report.assert_awaited_once_with(SourceType.BLOG)

    def test_sync_all_should_report_partial_failures(
        self, client: TestClient, indexing_service: AsyncMock
    ) -> None:
        # Arrange
        indexing_service.sync_all.return_value = SyncReport(
            total=2,
            succeeded=1,
            failed=1,
            outcomes=[
                SyncOutcome(source_type=SourceType.BLOG, source_id="a", success=True, chunk_count=2),
                SyncOutcome(source_type=SourceType.BLOG, source_id="b", success=False, error="quota"),
            ],
        )

        # Act
        response = client.post("/admin/embeddings/sync", headers=ADMIN_HEADERS)

        # Assert
        assert response.status_code == 200
        assert response.json()["failed"] == 1

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (EntityNotFoundError("blog", POST_ID), 404),
            (EmbeddingProviderError("Embedding call failed: quota"), 502),
        ],
    )
    def test_sync_single_should_map_errors(
        self, client: TestClient, indexing_service: AsyncMock, error, status_code
    ) -> None:
        # Arrange
        indexing_service.sync_one.side_effect = error

        # Act
        response = client.post(
            "/admin/embeddings/sync-single",
            json={"source_type": "blog", "source_id": POST_ID},
            headers=ADMIN_HEADERS,
        )

        # Assert
        assert response.status_code == status_code

    def test_sync_single_should_return_outcome(self, client: TestClient, indexing_service: AsyncMock) -> None:
        # Arrange
        indexing_service.sync_one.return_value = SyncOutcome(
            source_type=SourceType.BLOG, source_id=POST_ID, success=True, chunk_count=4, languages=["en", "tr"]
        )

        # Act
        response = client.post(
            "/admin/embeddings/sync-single",
            json={"source_type": "blog", "source_id": POST_ID},
            headers=ADMIN_HEADERS,
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["languages"] == ["en", "tr"]
        indexing_service.sync_one.assert_awaited_once_with(SourceType.BLOG, POST_ID)

    def test_sync_single_should_reject_unknown_type(self, client: TestClient) -> None:
        # Act
        response = client.post(
            "/admin/embeddings/sync-single",
            json={"source_type": "podcast", "source_id": POST_ID},
            headers=ADMIN_HEADERS,
        )

        # Assert
        assert response.status_code == 422

    def test_delete_routes_should_return_deleted_count(
        self, client: TestClient, indexing_service: AsyncMock
    ) -> None:
        # Arrange
        indexing_service.clear_one.return_value = 3
        indexing_service.clear_all.return_value = 10

        # Act
        one = client.delete(f"/admin/embeddings/blog/{POST_ID}", headers=ADMIN_HEADERS)
        everything = client.delete("/admin/embeddings", headers=ADMIN_HEADERS)

        # Assert
        assert one.json() == {"deleted": 3}
        assert everything.json() == {"deleted": 10}
