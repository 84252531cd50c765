"""Outbound proxy layer for the chat, geocoding and generative-AI providers.

Pipeline per request:

    parse_client_request -> resolve_credential -> build_upstream_request
        -> UpstreamInvoker.invoke -> translate

Usage:
    from riskmap.gateway import Gateway

    gateway = Gateway(httpx_client, settings)
    body = await gateway.geocode({"q": "Lisbon", "limit": 1})
    # body.raw is the provider's JSON, byte for byte

Rules:
- No retries
- No DB access
- No logging of keys, queries, or message bodies
- Every failure leaves as a GatewayError
"""

from riskmap.gateway.builders import ClientRequest, build_upstream_request, parse_client_request
from riskmap.gateway.credentials import AbsentCredential, resolve_credential
from riskmap.gateway.errors import GatewayError, lookup_status_error
from riskmap.gateway.invoker import UpstreamInvoker
from riskmap.gateway.operation import Gateway, GatewayOperation
from riskmap.gateway.translator import translate
from riskmap.gateway.types import (
    AbsentReason,
    GatewayStage,
    PassthroughBody,
    ProviderIdentity,
    TransportFailure,
    TransportFailureKind,
    UpstreamErrorResponse,
    UpstreamOutcome,
    UpstreamRequest,
    UpstreamSuccess,
)

__all__ = [
    # Core types
    "ProviderIdentity",
    "UpstreamRequest",
    "UpstreamOutcome",
    "UpstreamSuccess",
    "UpstreamErrorResponse",
    "TransportFailure",
    "TransportFailureKind",
    "PassthroughBody",
    "AbsentReason",
    "GatewayStage",
    # Pipeline
    "ClientRequest",
    "parse_client_request",
    "resolve_credential",
    "build_upstream_request",
    "UpstreamInvoker",
    "translate",
    # Operations
    "Gateway",
    "GatewayOperation",
    # Errors
    "GatewayError",
    "AbsentCredential",
    "lookup_status_error",
]
