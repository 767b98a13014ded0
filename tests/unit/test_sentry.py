"""Tests for Sentry integration module."""

from fastapi import HTTPException

from api.exceptions import FetchError, InputError
from api.sentry import _before_send, _before_send_transaction, init_sentry


class TestBeforeSend:
    """Tests for the before_send filter function."""

    def test_filters_4xx_http_exceptions(self):
        exc = HTTPException(status_code=404, detail="Not found")
        hint = {"exc_info": (HTTPException, exc, None)}

        assert _before_send({"message": "Not found"}, hint) is None

    def test_filters_input_errors(self):
        exc = InputError("Please provide a URL or paste content to analyze.")
        hint = {"exc_info": (InputError, exc, None)}

        assert _before_send({"message": "bad input"}, hint) is None

    def test_allows_fetch_errors(self):
        exc = FetchError("https://example.com")
        hint = {"exc_info": (FetchError, exc, None)}

        assert _before_send({"message": "fetch"}, hint) is not None

    def test_allows_5xx_http_exceptions(self):
        exc = HTTPException(status_code=500, detail="Server error")
        hint = {"exc_info": (HTTPException, exc, None)}

        assert _before_send({"message": "Server error"}, hint) is not None

    def test_filters_auth_headers(self):
        event = {
            "request": {
                "headers": {
                    "authorization": "Bearer secret-token",
                    "cookie": "session=abc123",
                    "x-api-key": "api-key-here",
                    "content-type": "application/json",
                }
            }
        }

        result = _before_send(event, {})

        assert result["request"]["headers"]["authorization"] == "[Filtered]"
        assert result["request"]["headers"]["cookie"] == "[Filtered]"
        assert result["request"]["headers"]["x-api-key"] == "[Filtered]"
        assert result["request"]["headers"]["content-type"] == "application/json"

    def test_handles_missing_request(self):
        assert _before_send({"message": "Some error"}, {}) is not None


class TestBeforeSendTransaction:
    """Tests for the transaction filter function."""

    def test_filters_health_check(self):
        assert _before_send_transaction({"transaction": "/api/health"}, {}) is None

    def test_keeps_analysis(self):
        event = {"transaction": "/v1/analyze"}
        assert _before_send_transaction(event, {}) == event


class TestInitSentry:
    """Tests for Sentry initialization."""

    def test_skips_without_dsn(self):
        assert init_sentry() is False
