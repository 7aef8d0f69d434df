"""Tests for the FastAPI app (app.py) routes and session behaviour."""

from __future__ import annotations

import inspect
import json
from datetime import datetime
from unittest.mock import patch

from helpers import make_export


def _upload(client, body: bytes, filename: str = "data.json"):
    return client.post(
        "/api/upload",
        files={"file": (filename, body, "application/json")},
    )


# ── HTML page ─────────────────────────────────


class TestDashboardPage:
    def test_returns_200(self, client):
        response = client.get("/")
        assert response.status_code == 200

    def test_content_type_is_html(self, client):
        response = client.get("/")
        assert "text/html" in response.headers["content-type"]

    def test_contains_page_title(self, client):
        response = client.get("/")
        assert "Tinder Statistics" in response.text

    def test_shows_upload_prompt_without_data(self, client):
        response = client.get("/")
        assert "const DASHBOARD_DATA = null;" in response.text
        assert "Download instructions" in response.text

    def test_injects_payload_after_upload(self, client, sample_bytes):
        _upload(client, sample_bytes)
        response = client.get("/")
        assert "const DASHBOARD_DATA = null;" not in response.text
        assert '"total_matches": 4' in response.text

    def test_missing_template_returns_500(self, client, tmp_path):
        with patch("app.TEMPLATE_PATH", tmp_path / "missing.html"):
            response = client.get("/")
        assert response.status_code == 500


# ── Upload ────────────────────────────────────


class TestUpload:
    def test_returns_payload(self, client, sample_bytes):
        response = _upload(client, sample_bytes)
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["total_matches"] == 4
        assert data["summary"]["response_rate"] == "38%"
        assert set(data["charts"]) == {
            "matches_by_month",
            "app_opens_by_month",
            "activity_by_day_of_week",
            "matches_by_day_of_week",
        }

    def test_invalid_json_is_decode_error(self, client):
        response = _upload(client, b"{not json")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "decode_error"

    def test_missing_usage_is_schema_error(self, client):
        response = _upload(client, b'{"User": {}}')
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "schema_error"

    def test_bad_date_is_date_parse_error(self, client):
        body = json.dumps(make_export(matches={"someday": 1})).encode()
        response = _upload(client, body)
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "date_parse_error"
        assert "someday" in detail["message"]

    def test_failed_upload_keeps_previous_session(self, client, sample_bytes):
        _upload(client, sample_bytes)
        _upload(client, b"garbage")
        data = client.get("/api/data").json()
        assert data["summary"]["total_matches"] == 4

    def test_new_upload_replaces_session(self, client, sample_bytes):
        _upload(client, sample_bytes)
        body = json.dumps(make_export(matches={"2022-05-01": 9})).encode()
        _upload(client, body)
        data = client.get("/api/data").json()
        assert data["summary"]["total_matches"] == 9

    def test_deeply_nested_json_is_decode_error(self, client):
        response = _upload(client, b"[" * 200_000)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "decode_error"

    def test_unpadded_date_key_is_date_parse_error(self, client):
        body = json.dumps(make_export(matches={"2021-1-3": 2})).encode()
        response = _upload(client, body)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "date_parse_error"

    def test_upload_route_is_sync(self):
        from app import api_upload

        assert not inspect.iscoroutinefunction(api_upload)

    def test_too_large_returns_413(self, client):
        with patch("app.MAX_UPLOAD_BYTES", 10):
            response = _upload(client, b'{"Usage": {}}   ')
        assert response.status_code == 413

    def test_missing_file_field_returns_422(self, client):
        response = client.post("/api/upload")
        assert response.status_code == 422


# ── JSON API ──────────────────────────────────


class TestApiData:
    def test_404_before_upload(self, client):
        response = client.get("/api/data")
        assert response.status_code == 404

    def test_returns_current_payload(self, client, sample_bytes):
        uploaded = _upload(client, sample_bytes).json()
        data = client.get("/api/data").json()
        assert data == uploaded

    def test_delete_clears_session(self, client, sample_bytes):
        _upload(client, sample_bytes)
        response = client.delete("/api/data")
        assert response.json() == {"status": "cleared"}
        assert client.get("/api/data").status_code == 404


class TestApiSession:
    def test_404_before_upload(self, client):
        assert client.get("/api/session").status_code == 404

    def test_describes_loaded_export(self, client, sample_bytes):
        payload = _upload(client, sample_bytes, filename="my_data.json").json()
        data = client.get("/api/session").json()
        assert data["filename"] == "my_data.json"
        assert data["generated_at"] == payload["generated_at"]
        assert datetime.fromisoformat(data["loaded_at"])

    def test_cleared_with_data(self, client, sample_bytes):
        _upload(client, sample_bytes)
        client.delete("/api/data")
        assert client.get("/api/session").status_code == 404


# ── Health check ──────────────────────────────


class TestHealthCheck:
    def test_healthz_returns_200(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health_returns_200(self, client):
        assert client.get("/health").status_code == 200


# ── 404 for unknown routes ───────────────────


class TestNotFound:
    def test_unknown_route_returns_404(self, client):
        response = client.get("/nonexistent")
        assert response.status_code == 404

    def test_unknown_api_route_returns_404(self, client):
        response = client.get("/api/nonexistent")
        assert response.status_code == 404
