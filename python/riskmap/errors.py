"""Envelope errors for the non-gateway routes.

Health and search history failures are reported as
{"error": {"code": "E_...", "message": "...", "request_id": "..."}} with the
status taken from ERROR_CODE_TO_STATUS. Gateway failures use their own flat
shape; see riskmap.gateway.errors.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Machine codes for envelope errors. Format: E_CATEGORY_NAME"""

    E_NOT_FOUND = "E_NOT_FOUND"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_STORAGE_ERROR = "E_STORAGE_ERROR"  # search history read/write failed
    E_INTERNAL = "E_INTERNAL"


ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_STORAGE_ERROR: 500,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Raised by services; serialized by riskmap.responses.api_error_handler.

    Attributes:
        code: The error code enum value
        message: Client-safe message (never driver or SQL text)
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)
