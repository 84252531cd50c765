"""Shared type definitions for the outbound proxy layer.

- ProviderIdentity: which upstream API a request targets
- UpstreamRequest: fully built request, ready to send
- UpstreamOutcome: exactly one of UpstreamSuccess, UpstreamErrorResponse, TransportFailure
- PassthroughBody: an upstream success body, verified to be JSON, returned unchanged

Every value here lives for one request only. Nothing is cached or shared.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderIdentity(str, Enum):
    """Upstream providers the gateway forwards to."""

    CHAT_COMPLETION = "chat"
    GEOCODE = "geocode"
    GENERATIVE_AI = "generate"


class TransportFailureKind(str, Enum):
    """Why no HTTP response was received."""

    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    OTHER = "other"


class AbsentReason(str, Enum):
    """Why a credential could not be resolved.

    MISSING: the variable is not set at all.
    EMPTY: the variable is set to a zero-length string.
    """

    MISSING = "missing"
    EMPTY = "empty"


class GatewayStage(str, Enum):
    """States of a gateway operation, in execution order."""

    VALIDATING = "validating"
    CREDENTIAL_RESOLVING = "credential_resolving"
    INVOKING = "invoking"
    TRANSLATING = "translating"


@dataclass(frozen=True)
class UpstreamRequest:
    """Request ready to be sent upstream.

    url and headers may carry the provider credential, so they are kept out
    of repr() to stop them leaking into tracebacks and logs.

    Attributes:
        provider: Target provider
        method: HTTP method ("GET" or "POST")
        url: Absolute target URL, query string included
        headers: Request headers
        json_body: JSON body to send, or None for bodiless requests
    """

    provider: ProviderIdentity
    method: str
    url: str = field(repr=False)
    headers: dict[str, str] = field(default_factory=dict, repr=False)
    json_body: dict[str, Any] | None = field(default=None, repr=False)


@dataclass(frozen=True)
class UpstreamSuccess:
    """A 2xx response. body is the raw, unparsed payload."""

    status: int
    body: bytes = field(repr=False)


@dataclass(frozen=True)
class UpstreamErrorResponse:
    """A non-2xx response. body is the decoded response text, kept for diagnostics."""

    status: int
    body: str


@dataclass(frozen=True)
class TransportFailure:
    """No response was received.

    Attributes:
        kind: Failure classification
        detail: Stringified exception, supplementary diagnostics only
    """

    kind: TransportFailureKind
    detail: str = ""


UpstreamOutcome = UpstreamSuccess | UpstreamErrorResponse | TransportFailure


@dataclass(frozen=True)
class PassthroughBody:
    """Upstream success payload returned to the client as-is.

    Attributes:
        raw: Exact bytes received from the provider
        data: Parsed JSON value (proof that raw is valid JSON)
    """

    raw: bytes = field(repr=False)
    data: Any = field(repr=False)
