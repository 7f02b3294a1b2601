# web_api/tests/test_users_api.py
"""Tests for the per-user progress endpoints."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

ENDPOINTS = ["progress", "recommended-units", "recent-units"]


class TestUserEndpointAccess:
    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_without_auth_returns_401(self, endpoint):
        response = client.get(f"/api/users/{uuid.uuid4()}/{endpoint}")
        assert response.status_code == 401

    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_other_users_data_returns_403(self, endpoint, auth_headers):
        response = client.get(f"/api/users/{uuid.uuid4()}/{endpoint}", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Not authorized"

    def test_admin_cannot_read_other_users_progress(self, make_token):
        headers = {"Authorization": f"Bearer {make_token(uuid.uuid4(), role='admin')}"}
        response = client.get(f"/api/users/{uuid.uuid4()}/progress", headers=headers)
        assert response.status_code == 403


class TestProgressSummary:
    def test_returns_summary(self, auth_headers, user_id, mock_db):
        summary = {
            "completed": 3,
            "inProgress": 1,
            "totalUnits": 10,
            "completionRate": 30.0,
            "streak": 2,
            "lastActivity": "2026-02-01T09:30:00+00:00",
        }
        with (
            patch("web_api.routes.users.get_connection", mock_db),
            patch(
                "web_api.routes.users.get_progress_summary",
                new_callable=AsyncMock,
                return_value=summary,
            ) as mock_summary,
        ):
            response = client.get(f"/api/users/{user_id}/progress", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == summary
        mock_summary.assert_awaited_once_with(mock_db.conn, user_id)


class TestRecommendedUnits:
    def test_passes_limit(self, auth_headers, user_id, mock_db):
        unit_id = uuid.uuid4()
        with (
            patch("web_api.routes.users.get_connection", mock_db),
            patch(
                "web_api.routes.users.recommend_units",
                new_callable=AsyncMock,
                return_value=[
                    {"unit_id": unit_id, "title": "Hooks", "technologies": ["react"]}
                ],
            ) as mock_recommend,
        ):
            response = client.get(
                f"/api/users/{user_id}/recommended-units?limit=3", headers=auth_headers
            )

        assert response.status_code == 200
        assert response.json() == [
            {"unit_id": str(unit_id), "title": "Hooks", "technologies": ["react"]}
        ]
        mock_recommend.assert_awaited_once_with(mock_db.conn, user_id, limit=3)

    def test_default_limit_is_five(self, auth_headers, user_id, mock_db):
        with (
            patch("web_api.routes.users.get_connection", mock_db),
            patch(
                "web_api.routes.users.recommend_units",
                new_callable=AsyncMock,
                return_value=[],
            ) as mock_recommend,
        ):
            client.get(f"/api/users/{user_id}/recommended-units", headers=auth_headers)

        mock_recommend.assert_awaited_once_with(mock_db.conn, user_id, limit=5)

    def test_invalid_limit_returns_422(self, auth_headers, user_id):
        response = client.get(
            f"/api/users/{user_id}/recommended-units?limit=0", headers=auth_headers
        )
        assert response.status_code == 422


class TestRecentUnits:
    def test_returns_recent_units(self, auth_headers, user_id, mock_db):
        with (
            patch("web_api.routes.users.get_connection", mock_db),
            patch(
                "web_api.routes.users.get_recent_units",
                new_callable=AsyncMock,
                return_value=[{"title": "Two Sum", "progress": {"status": "completed"}}],
            ) as mock_recent,
        ):
            response = client.get(
                f"/api/users/{user_id}/recent-units", headers=auth_headers
            )

        assert response.status_code == 200
        assert response.json()[0]["progress"]["status"] == "completed"
        mock_recent.assert_awaited_once_with(mock_db.conn, user_id, limit=5)
