# web_api/tests/test_store_errors.py
"""Database failures surface as a logged 500 and are not retried."""

import logging
import uuid
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from main import app

client = TestClient(app)


def store_down() -> OperationalError:
    return OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))


class TestStoreErrors:
    def test_read_failure_returns_500(self, auth_headers, user_id, mock_db, caplog):
        with (
            patch("web_api.routes.users.get_connection", mock_db),
            patch(
                "web_api.routes.users.get_progress_summary",
                new_callable=AsyncMock,
                side_effect=store_down(),
            ) as mock_summary,
            caplog.at_level(logging.ERROR, logger="main"),
        ):
            response = client.get(f"/api/users/{user_id}/progress", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Database error"}
        mock_summary.assert_awaited_once()

        records = [r for r in caplog.records if r.name == "main"]
        assert len(records) == 1
        assert f"/api/users/{user_id}/progress" in records[0].getMessage()
        assert records[0].exc_info is not None
        assert records[0].exc_info[0] is OperationalError

    def test_write_failure_returns_500(self, auth_headers, mock_db):
        with (
            patch("web_api.routes.progress.get_transaction", mock_db),
            patch("web_api.routes.progress.load_unit", new_callable=AsyncMock),
            patch(
                "web_api.routes.progress.mark_unit_complete",
                new_callable=AsyncMock,
                side_effect=store_down(),
            ) as mock_mark,
        ):
            response = client.post(
                f"/api/units/{uuid.uuid4()}/complete", headers=auth_headers
            )

        assert response.status_code == 500
        assert response.json() == {"detail": "Database error"}
        mock_mark.assert_awaited_once()
