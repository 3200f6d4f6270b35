"""Tests for the API client: envelope handling, timeouts and retries."""

from unittest.mock import Mock, patch

import pytest
import requests

from hotel_cms.client import TIMEOUT_MESSAGE, ApiClient


def _response(status=200, payload=None, content_type="application/json", reason="OK", text=""):
    response = Mock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    response.headers = {"content-type": content_type}
    response.json.return_value = payload
    response.text = text
    return response


@pytest.fixture
def api():
    client = ApiClient("https://hotel.example/", timeout=5, retries=2, retry_delay=0.5)
    client.session = Mock()
    return client


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("hotel_cms.client.time.sleep") as sleep:
        yield sleep


class TestApiClient:
    """ApiClient request/response behaviour."""

    def test_unwraps_data_envelope(self, api):
        api.session.request.return_value = _response(payload={"success": True, "data": [{"id": 1}]})

        result = api.get("/api/categories")

        assert result.success is True
        assert result.data == [{"id": 1}]
        api.session.request.assert_called_once_with("GET", "https://hotel.example/api/categories", timeout=5)

    def test_message_only_body(self, api):
        api.session.request.return_value = _response(payload={"success": True, "message": "Room deleted successfully"})

        result = api.delete("/api/admin/rooms/1")

        assert result.success is True
        assert result.data is None
        assert result.message == "Room deleted successfully"

    def test_plain_json_body(self, api):
        api.session.request.return_value = _response(payload={"url": "https://utfs.io/f/k", "key": "k"})
        assert api.upload("/api/upload", files={"file": ("a.png", b"x")}).data == {"url": "https://utfs.io/f/k", "key": "k"}

    def test_error_body_surfaces_message(self, api):
        api.session.request.return_value = _response(400, {"success": False, "error": "Validation failed"}, reason="Bad Request")

        result = api.post("/api/admin/rooms", {"title": ""})

        assert result.success is False
        assert result.error == "Validation failed"
        assert result.status_code == 400

    def test_non_json_error(self, api):
        api.session.request.return_value = _response(502, content_type="text/html", reason="Bad Gateway")

        result = api.get("/api/categories")

        assert result.success is False
        assert result.error == "HTTP Error 502: Bad Gateway"

    def test_non_json_success_returns_text(self, api):
        api.session.request.return_value = _response(content_type="text/html", text="<html></html>")
        assert api.get("/rooms").data == "<html></html>"

    def test_timeout_is_not_retried(self, api, no_sleep):
        api.session.request.side_effect = requests.exceptions.Timeout()

        result = api.get("/api/categories")

        assert result.success is False
        assert result.error == TIMEOUT_MESSAGE
        assert result.timed_out is True
        assert api.session.request.call_count == 1
        no_sleep.assert_not_called()

    def test_connection_errors_are_retried(self, api, no_sleep):
        ok = _response(payload={"success": True, "data": []})
        api.session.request.side_effect = [requests.exceptions.ConnectionError("reset"), ok]

        result = api.get("/api/gallery")

        assert result.success is True
        assert api.session.request.call_count == 2
        no_sleep.assert_called_once_with(0.5)

    def test_gives_up_after_last_attempt(self, api, no_sleep):
        api.session.request.side_effect = requests.exceptions.ConnectionError("down")

        result = api.get("/api/gallery")

        assert result.success is False
        assert "down" in result.error
        assert api.session.request.call_count == 3
        # no pause after the final attempt
        assert no_sleep.call_count == 2

    def test_http_errors_are_not_retried(self, api):
        api.session.request.return_value = _response(500, {"success": False, "error": "Internal server error"})

        result = api.get("/api/categories")

        assert result.error == "Internal server error"
        assert api.session.request.call_count == 1

    def test_per_call_overrides(self, api):
        api.session.request.side_effect = requests.exceptions.ConnectionError("down")

        api.get("/api/gallery", retries=0, timeout=1)

        api.session.request.assert_called_once_with("GET", "https://hotel.example/api/gallery", timeout=1)

    def test_put_sends_json(self, api):
        api.session.request.return_value = _response(payload={"success": True, "data": {"id": 3}})

        api.put("/api/admin/rooms/3", {"title": "Suite"})

        api.session.request.assert_called_once_with(
            "PUT", "https://hotel.example/api/admin/rooms/3", timeout=5, json={"title": "Suite"}
        )
