"""API response helpers and exception handlers.

Two response shapes exist:

- Search history and health routes use an envelope:
  - Success: { "data": ... }
  - Error: { "error": { "code": "E_...", "message": "...", "request_id": "..." } }

- Gateway routes return the provider's JSON unchanged on success and a flat
  body on failure, identical for every provider:
  - Error: { "error": "...", "message": "...", "code": "...", "status"?: int }

The request_id is included in envelope errors for debugging and support,
and in the X-Request-ID header of every response.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from riskmap.errors import ApiError, ApiErrorCode
from riskmap.gateway import GatewayError, PassthroughBody
from riskmap.logging import get_logger, get_request_id

logger = get_logger(__name__)


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap.

    Returns:
        Dict with "data" key containing the response.
    """
    return {"data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        code: The error code enum value.
        message: Human-readable error message.
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with "error" key containing code, message, and request_id.
    """
    if request_id is None:
        request_id = get_request_id()

    error = {"code": code.value, "message": message}
    if request_id:
        error["request_id"] = request_id

    return {"error": error}


def passthrough_response(body: PassthroughBody) -> Response:
    """Return an upstream success body byte for byte."""
    return Response(content=body.raw, status_code=200, media_type="application/json")


def gateway_error_response(exc: GatewayError) -> JSONResponse:
    """Serialize a GatewayError in the flat gateway shape."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_body())


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return proper JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message),
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Handle GatewayError exceptions raised by gateway routes."""
    return gateway_error_response(exc)


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle FastAPI HTTPException and return proper JSON response."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        404: ApiErrorCode.E_NOT_FOUND,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error"),
    )
