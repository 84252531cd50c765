"""Gateway error taxonomy and per-provider status tables.

Every failure of a gateway operation ends as exactly one GatewayError. The
FastAPI handler in riskmap.responses serializes it as:

    {"error": "<human summary>", "message": "<detail>", "code": "<MACHINE_CODE>",
     "status": <upstream status, only for provider-reported errors>}

Error classes:
- InvalidInput: client mistake, 400
- AbsentCredential: operator misconfiguration, 500
- UpstreamError: provider-reported fault, status mirrors the provider
- TransportFailure: no response received, always 503
- ParseFailure: 2xx with a body that is not JSON, 502

Status tables are kept one per provider. Quota semantics differ between
providers (only geocoding defines 402), so they are deliberately not merged.
"""

from dataclasses import dataclass
from typing import Any

from riskmap.gateway.types import AbsentReason, ProviderIdentity, TransportFailureKind


@dataclass(frozen=True)
class ProviderText:
    """Machine code prefix and message wording for one provider."""

    prefix: str
    key_label: str  # "<key_label> API key is missing"
    short_name: str  # "<short_name> request timed out"
    service_name: str  # "Cannot connect to <service_name>"
    upstream_name: str  # "Failed to reach <upstream_name>"
    empty_input_code: str


PROVIDER_TEXT: dict[ProviderIdentity, ProviderText] = {
    ProviderIdentity.CHAT_COMPLETION: ProviderText(
        prefix="AI",
        key_label="AI service",
        short_name="AI",
        service_name="AI service",
        upstream_name="AI service",
        empty_input_code="AI_EMPTY_MESSAGES",
    ),
    ProviderIdentity.GEOCODE: ProviderText(
        prefix="GEOCODE",
        key_label="Geocoding",
        short_name="Geocoding",
        service_name="geocoding service",
        upstream_name="OpenCage API",
        empty_input_code="GEOCODE_EMPTY_QUERY",
    ),
    ProviderIdentity.GENERATIVE_AI: ProviderText(
        prefix="GEMINI",
        key_label="Gemini",
        short_name="Gemini",
        service_name="Gemini service",
        upstream_name="Gemini API",
        empty_input_code="GEMINI_EMPTY_CONTENTS",
    ),
}


# =============================================================================
# Per-provider upstream status tables: status -> (summary, machine code)
# =============================================================================

CHAT_STATUS_TABLE: dict[int, tuple[str, str]] = {
    400: ("Invalid AI service request", "AI_BAD_REQUEST"),
    401: ("Invalid or expired AI service API key", "AI_UNAUTHORIZED"),
    403: ("AI service access forbidden", "AI_FORBIDDEN"),
    429: ("Too many AI requests. Please try again later", "AI_RATE_LIMIT"),
    500: ("AI service internal error", "AI_SERVER_ERROR"),
    503: ("AI service temporarily unavailable", "AI_UNAVAILABLE"),
}
CHAT_STATUS_DEFAULT = ("AI service error", "AI_ERROR")

GEOCODE_STATUS_TABLE: dict[int, tuple[str, str]] = {
    401: ("Invalid or expired OpenCage API key", "GEOCODE_UNAUTHORIZED"),
    402: ("OpenCage API quota exceeded", "GEOCODE_QUOTA_EXCEEDED"),
    403: ("OpenCage API access forbidden", "GEOCODE_FORBIDDEN"),
    429: ("Too many geocoding requests. Please try again later", "GEOCODE_RATE_LIMIT"),
}
GEOCODE_STATUS_DEFAULT = ("Geocoding service error", "GEOCODE_ERROR")

GENERATE_STATUS_TABLE: dict[int, tuple[str, str]] = {
    400: ("Invalid Gemini API request", "GEMINI_BAD_REQUEST"),
    401: ("Invalid or expired Gemini API key", "GEMINI_UNAUTHORIZED"),
    403: ("Gemini API access forbidden", "GEMINI_FORBIDDEN"),
    429: ("Too many AI requests. Please try again later", "GEMINI_RATE_LIMIT"),
    500: ("Gemini service internal error", "GEMINI_SERVER_ERROR"),
    503: ("Gemini service temporarily unavailable", "GEMINI_UNAVAILABLE"),
}
GENERATE_STATUS_DEFAULT = ("Gemini AI service error", "GEMINI_ERROR")

STATUS_TABLES: dict[ProviderIdentity, tuple[dict[int, tuple[str, str]], tuple[str, str]]] = {
    ProviderIdentity.CHAT_COMPLETION: (CHAT_STATUS_TABLE, CHAT_STATUS_DEFAULT),
    ProviderIdentity.GEOCODE: (GEOCODE_STATUS_TABLE, GEOCODE_STATUS_DEFAULT),
    ProviderIdentity.GENERATIVE_AI: (GENERATE_STATUS_TABLE, GENERATE_STATUS_DEFAULT),
}


class GatewayError(Exception):
    """The single client-facing failure value of a gateway operation.

    Attributes:
        http_status: Status code returned to the client
        error: Short human-readable summary
        message: Detail text (upstream body text for provider errors)
        code: Stable machine code for programmatic branching
        upstream_status: Provider status, only for provider-reported errors
    """

    def __init__(
        self,
        http_status: int,
        error: str,
        message: str,
        code: str,
        upstream_status: int | None = None,
    ):
        self.http_status = http_status
        self.error = error
        self.message = message
        self.code = code
        self.upstream_status = upstream_status
        super().__init__(f"{code}: {error}")

    def to_body(self) -> dict[str, Any]:
        """Serialize to the flat client-facing JSON body."""
        body: dict[str, Any] = {
            "error": self.error,
            "message": self.message,
            "code": self.code,
        }
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        return body


def client_status(upstream_status: int) -> int:
    """Mirror an upstream status, falling back to 500 when it is not a legal HTTP status."""
    if 100 <= upstream_status <= 599:
        return upstream_status
    return 500


def lookup_status_error(provider: ProviderIdentity, status: int) -> tuple[str, str]:
    """Look up (summary, machine code) for an upstream status in the provider's table."""
    table, default = STATUS_TABLES[provider]
    return table.get(status, default)


def invalid_input_error(
    provider: ProviderIdentity, detail: str, *, empty: bool = False
) -> GatewayError:
    """Client sent a request the gateway refuses to forward."""
    text = PROVIDER_TEXT[provider]
    code = text.empty_input_code if empty else f"{text.prefix}_INVALID_REQUEST"
    return GatewayError(400, "Invalid request", detail, code)


def absent_credential_error(
    prefix: str, key_label: str, env_name: str, reason: AbsentReason
) -> GatewayError:
    """Credential unset or empty. A server-side fault, so 500 rather than 401.

    Takes plain strings so the maps config route can share it.
    """
    if reason == AbsentReason.EMPTY:
        return GatewayError(
            500,
            f"{key_label} API key is not configured",
            f"The {env_name} environment variable is empty. "
            "Please add a valid API key to the backend .env file.",
            f"{prefix}_KEY_EMPTY",
        )
    return GatewayError(
        500,
        f"{key_label} API key is missing",
        f"The {env_name} environment variable is not set. "
        "Please add it to the backend .env file.",
        f"{prefix}_KEY_MISSING",
    )


def upstream_status_error(provider: ProviderIdentity, status: int, body_text: str) -> GatewayError:
    """Provider answered with a non-2xx status. body_text is kept verbatim."""
    summary, code = lookup_status_error(provider, status)
    return GatewayError(client_status(status), summary, body_text, code, upstream_status=status)


def transport_error(
    provider: ProviderIdentity, kind: TransportFailureKind, detail: str
) -> GatewayError:
    """No response received. Always 503; the exception text is only supplementary."""
    text = PROVIDER_TEXT[provider]
    if kind == TransportFailureKind.TIMEOUT:
        summary, code = f"{text.short_name} request timed out", f"{text.prefix}_TIMEOUT"
    elif kind == TransportFailureKind.CONNECTION_REFUSED:
        summary = f"Cannot connect to {text.service_name}"
        code = f"{text.prefix}_CONNECTION_ERROR"
    else:
        summary = f"{text.short_name} service unavailable"
        code = f"{text.prefix}_SERVICE_ERROR"

    message = f"Failed to reach {text.upstream_name}"
    if detail:
        message = f"{message}: {detail}"
    return GatewayError(503, summary, message, code)


def parse_error(provider: ProviderIdentity) -> GatewayError:
    """Provider answered 2xx with a body that is not JSON."""
    text = PROVIDER_TEXT[provider]
    return GatewayError(
        502,
        f"Failed to parse {text.short_name} response",
        f"The {text.upstream_name} returned an invalid response format",
        f"{text.prefix}_PARSE_ERROR",
    )
