"""
Tests for the caller-side AnalysisClient and its error normalization.

The analysis service is simulated with httpx.MockTransport; each case checks
that exactly one flat, human-readable message comes out.
"""

import json

import httpx
import pytest

from leadintel.client.adapter import (
    AUTH_REQUIRED_MESSAGE,
    DEFAULT_ERROR_MESSAGE,
    QUOTA_EXCEEDED_MESSAGE,
    TIMEOUT_MESSAGE,
    UNREACHABLE_MESSAGE,
    AnalysisClient,
    AnalysisClientError,
    normalize_error_response,
    unwrap_error_message,
)
from leadintel.models.enums import ErrorKind, Tier1Status


BASE_URL = "https://api.example.com"


def make_client(handler, access_token="token-user-1") -> AnalysisClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnalysisClient(http_client, BASE_URL, access_token=access_token)


class TestAnalyze:

    async def test_success(self, signal_payload):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=signal_payload)

        result = await make_client(handler).analyze("CFO departs Acme Corp")

        assert result.tier1.status == Tier1Status.URGENT
        assert seen == {
            "url": "https://api.example.com/analyze",
            "authorization": "Bearer token-user-1",
            "body": {"text": "CFO departs Acme Corp"},
        }

    async def test_no_session_fails_without_network(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler, access_token=None).analyze("Acme news")

        assert exc_info.value.message == AUTH_REQUIRED_MESSAGE
        assert exc_info.value.kind == ErrorKind.UNAUTHENTICATED

    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Failed to fetch", request=request)

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == UNREACHABLE_MESSAGE
        assert exc_info.value.kind == ErrorKind.BACKEND_UNREACHABLE
        assert "health check" in exc_info.value.message

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == TIMEOUT_MESSAGE
        assert exc_info.value.kind == ErrorKind.BACKEND_TIMEOUT

    @pytest.mark.parametrize(
        "error",
        [
            httpx.DecodingError("Error -3 while decompressing data: incorrect header check"),
            httpx.TooManyRedirects("Exceeded maximum allowed redirects."),
        ],
    )
    async def test_other_request_errors_are_normalized(self, error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE
        assert exc_info.value.kind == ErrorKind.INTERNAL

    async def test_quota_exceeded_uses_fixed_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(402, json={"error": "Quota Exceeded", "kind": "quota_exceeded"})

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == QUOTA_EXCEEDED_MESSAGE
        assert exc_info.value.kind == ErrorKind.QUOTA_EXCEEDED
        assert exc_info.value.status_code == 402

    async def test_structured_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                500,
                json={"error": "Failed to analyze content. Please try again.", "kind": "schema_violation"},
            )

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == "Failed to analyze content. Please try again."
        assert exc_info.value.kind == ErrorKind.SCHEMA_VIOLATION

    async def test_invalid_report_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"tier1": {"status": "Urgent/High-Priority"}})

        with pytest.raises(AnalysisClientError) as exc_info:
            await make_client(handler).analyze("Acme news")

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE
        assert exc_info.value.kind == ErrorKind.SCHEMA_VIOLATION


class TestNormalizeErrorResponse:

    def test_nested_error_object(self):
        response = httpx.Response(401, json={"error": {"error": "Unauthorized: User not logged in"}})

        error = normalize_error_response(response)

        assert error.message == "Unauthorized: User not logged in"
        assert error.status_code == 401

    def test_stringified_error(self):
        inner = json.dumps({"error": "Input text is required"})
        response = httpx.Response(400, json={"error": inner, "kind": "invalid_input"})

        error = normalize_error_response(response)

        assert error.message == "Input text is required"
        assert error.kind == ErrorKind.INVALID_INPUT

    def test_unknown_kind_falls_back_to_internal(self):
        response = httpx.Response(500, json={"error": "boom", "kind": "something_new"})

        assert normalize_error_response(response).kind == ErrorKind.INTERNAL

    def test_no_body_uses_status_line(self):
        error = normalize_error_response(httpx.Response(503))

        assert error.message == "503 Service Unavailable"

    def test_unparsable_body_uses_status_line(self):
        error = normalize_error_response(httpx.Response(502, text="<html>Bad gateway</html>"))

        assert error.message == "502 Bad Gateway"

    def test_unknown_status_uses_default(self):
        error = normalize_error_response(httpx.Response(599))

        assert error.message == DEFAULT_ERROR_MESSAGE


class TestUnwrapErrorMessage:

    def test_plain_string(self):
        assert unwrap_error_message("  plain failure ") == "plain failure"

    def test_message_key(self):
        assert unwrap_error_message({"message": "upstream said no"}) == "upstream said no"

    def test_non_json_brace_string_kept(self):
        assert unwrap_error_message("{not json") == "{not json"

    def test_self_nesting_is_bounded(self):
        payload = "leaf"
        for _ in range(20):
            payload = {"error": payload}

        assert unwrap_error_message(payload) is None

    def test_unusable_payload(self):
        assert unwrap_error_message(42) is None
        assert unwrap_error_message({"detail": "x"}) is None


class TestCheckHealth:

    async def test_online(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(
                200,
                json={"status": "online", "timestamp": "2026-01-01T00:00:00Z", "model": "gemini-1.5-flash"},
            )

        status = await make_client(handler, access_token=None).check_health()

        assert status.ok is True
        assert status.message == "Backend online (model: gemini-1.5-flash)"

    async def test_backend_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "Internal server error", "kind": "internal"})

        status = await make_client(handler).check_health()

        assert status.ok is False
        assert status.message == "Backend error: Internal server error"

    async def test_connection_failure_never_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        status = await make_client(handler).check_health()

        assert status.ok is False
        assert status.message == "Connection failed: Name or service not known"

    async def test_unexpected_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "degraded"})

        status = await make_client(handler).check_health()

        assert status.ok is False
