"""Tests for error handling and response envelopes.

Verifies:
- Error envelope shape is correct
- Every error code maps to correct HTTP status
- Unknown exceptions return E_INTERNAL with 500
- Malformed JSON returns E_INVALID_REQUEST
- GatewayError serializes to the flat gateway shape
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from riskmap.errors import ERROR_CODE_TO_STATUS, ApiError, ApiErrorCode
from riskmap.gateway import GatewayError
from riskmap.responses import (
    api_error_handler,
    error_response,
    gateway_error_handler,
    success_response,
    unhandled_exception_handler,
)


class TestErrorResponse:
    """Tests for error response envelope format."""

    def test_error_response_has_correct_shape(self):
        """Error response contains error object with code and message."""
        response = error_response(ApiErrorCode.E_NOT_FOUND, "Resource not found")

        assert response["error"]["code"] == "E_NOT_FOUND"
        assert response["error"]["message"] == "Resource not found"

    def test_error_response_code_is_string(self):
        """Error code in response is a string, not enum."""
        response = error_response(ApiErrorCode.E_INTERNAL, "Boom")

        assert isinstance(response["error"]["code"], str)

    def test_explicit_request_id_included(self):
        response = error_response(ApiErrorCode.E_INVALID_REQUEST, "Bad", request_id="req-1")

        assert response["error"]["request_id"] == "req-1"


class TestSuccessResponse:
    """Tests for success response envelope format."""

    def test_success_response_has_data_key(self):
        """Success response wraps data in 'data' key."""
        response = success_response({"id": "123"})

        assert response == {"data": {"id": "123"}}

    def test_success_response_with_list(self):
        """Success response works with list data."""
        items = [{"id": "1"}, {"id": "2"}]

        assert success_response(items)["data"] == items


class TestErrorCodeToStatus:
    """Tests for error code to HTTP status mapping."""

    def test_all_error_codes_have_status_mapping(self):
        """Every ApiErrorCode has a corresponding HTTP status."""
        for code in ApiErrorCode:
            assert code in ERROR_CODE_TO_STATUS, f"Missing status mapping for {code}"

    @pytest.mark.parametrize(
        "code,expected_status",
        [
            (ApiErrorCode.E_NOT_FOUND, 404),
            (ApiErrorCode.E_INVALID_REQUEST, 400),
            (ApiErrorCode.E_STORAGE_ERROR, 500),
            (ApiErrorCode.E_INTERNAL, 500),
        ],
    )
    def test_error_code_maps_to_correct_status(self, code: ApiErrorCode, expected_status: int):
        """Each error code maps to the expected HTTP status."""
        assert ERROR_CODE_TO_STATUS[code] == expected_status

    def test_api_error_derives_status_code(self):
        error = ApiError(ApiErrorCode.E_INVALID_REQUEST, "Bad input")

        assert error.status_code == 400
        assert error.message == "Bad input"


def _crash_app() -> FastAPI:
    """App with routes that raise each error type."""
    test_app = FastAPI()
    test_app.add_exception_handler(ApiError, api_error_handler)
    test_app.add_exception_handler(GatewayError, gateway_error_handler)
    test_app.add_exception_handler(Exception, unhandled_exception_handler)

    @test_app.get("/crash")
    async def crash():
        raise RuntimeError("secret internal detail")

    @test_app.get("/api-error")
    async def api_error():
        raise ApiError(ApiErrorCode.E_NOT_FOUND, "Search not found")

    @test_app.get("/gateway-error")
    async def gateway_error():
        raise GatewayError(429, "Rate limited", "slow down", "AI_RATE_LIMIT", upstream_status=429)

    return test_app


class TestExceptionHandlers:
    """Tests for registered exception handlers."""

    def test_unhandled_exception_returns_500_with_e_internal(self):
        """Unhandled exceptions return 500 with E_INTERNAL code and no details."""
        client = TestClient(_crash_app(), raise_server_exceptions=False)
        response = client.get("/crash")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "E_INTERNAL"
        assert "secret internal detail" not in response.text

    def test_api_error_uses_envelope(self):
        client = TestClient(_crash_app())
        response = client.get("/api-error")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_NOT_FOUND"

    def test_gateway_error_uses_flat_shape(self):
        client = TestClient(_crash_app())
        response = client.get("/gateway-error")

        assert response.status_code == 429
        assert response.json() == {
            "error": "Rate limited",
            "message": "slow down",
            "code": "AI_RATE_LIMIT",
            "status": 429,
        }


class TestMalformedJsonHandling:
    """Tests for malformed JSON body handling."""

    def test_malformed_json_on_search_returns_envelope(self, client: TestClient):
        """Malformed JSON body on a non-gateway route returns E_INVALID_REQUEST."""
        response = client.post(
            "/search",
            content="{invalid json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    def test_malformed_json_on_gateway_returns_flat_shape(self, client: TestClient):
        """Gateway routes report malformed JSON with their own machine code."""
        response = client.post(
            "/api/details",
            content="{invalid json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "AI_INVALID_REQUEST"
        assert body["error"] == "Invalid request"
        assert body["message"] == "Malformed JSON body"

    def test_unknown_route_returns_404_envelope(self, client: TestClient):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_NOT_FOUND"
