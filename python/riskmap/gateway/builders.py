"""Upstream request construction.

Two steps, run in this order by the gateway operation:

1. parse_client_request: validate the raw client payload (no network, no
   credential). Failures are InvalidInput (400).
2. build_upstream_request: turn a validated request plus the credential into
   the provider's exact wire request.

Wire contracts:
- Chat: POST <AI_SERVICE_URL>, Authorization: Bearer <key>.
  Default model filled in; max_tokens / temperature / top_p / stream copied
  only when the client sent them.
- Geocode: GET <OPENCAGE_URL>?q=<query>&key=<key>[&limit=][&language=].
  The key travels as a query parameter, which is this provider's auth contract.
- Generate: POST <GEMINI_BASE_URL>/<model>:generateContent?key=<key>.
  The client body is forwarded structurally unmodified.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, cast

import httpx
from pydantic import BaseModel, ValidationError

from riskmap.config import Settings
from riskmap.gateway.errors import invalid_input_error
from riskmap.gateway.types import ProviderIdentity, UpstreamRequest
from riskmap.schemas.gateway import (
    ChatCompletionRequest,
    GenerateContentRequest,
    GeocodeRequest,
)

REQUEST_MODELS: dict[ProviderIdentity, type[BaseModel]] = {
    ProviderIdentity.CHAT_COMPLETION: ChatCompletionRequest,
    ProviderIdentity.GEOCODE: GeocodeRequest,
    ProviderIdentity.GENERATIVE_AI: GenerateContentRequest,
}

# Sampling controls forwarded to the chat provider only when present
CHAT_OPTIONAL_FIELDS = ("max_tokens", "temperature", "top_p", "stream")


@dataclass(frozen=True)
class ClientRequest:
    """A validated client request.

    Attributes:
        provider: Target provider
        payload: Validated request model
        raw: The client's original JSON object
    """

    provider: ProviderIdentity
    payload: BaseModel
    raw: dict[str, Any] = field(repr=False)


def _describe_validation_error(exc: ValidationError) -> str:
    """Render the first pydantic error as "field: message"."""
    errors = exc.errors()
    if not errors:
        return "Request body is invalid"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def _check_not_empty(provider: ProviderIdentity, payload: BaseModel) -> None:
    """Reject requests with nothing to forward."""
    if isinstance(payload, ChatCompletionRequest) and not payload.messages:
        raise invalid_input_error(
            provider, "The 'messages' array cannot be empty", empty=True
        )
    if isinstance(payload, GeocodeRequest) and not payload.q.strip():
        raise invalid_input_error(
            provider, "The 'q' parameter (location query) cannot be empty", empty=True
        )
    if isinstance(payload, GenerateContentRequest) and not payload.contents:
        raise invalid_input_error(
            provider, "The 'contents' array cannot be empty", empty=True
        )


def parse_client_request(provider: ProviderIdentity, raw: Any) -> ClientRequest:
    """Validate a raw client payload for a provider.

    Args:
        provider: Target provider.
        raw: Decoded JSON body (chat, generate) or query parameters (geocode).

    Returns:
        ClientRequest holding the validated model and the original payload.

    Raises:
        GatewayError: 400 <PREFIX>_INVALID_REQUEST on schema violations,
            400 with the provider's empty-input code on empty input.
    """
    if not isinstance(raw, dict):
        raise invalid_input_error(provider, "Request body must be a JSON object")

    try:
        payload = REQUEST_MODELS[provider].model_validate(raw)
    except ValidationError as e:
        raise invalid_input_error(provider, _describe_validation_error(e)) from e

    _check_not_empty(provider, payload)
    return ClientRequest(provider=provider, payload=payload, raw=raw)


def _build_chat(req: ClientRequest, api_key: str, settings: Settings) -> UpstreamRequest:
    payload = cast(ChatCompletionRequest, req.payload)

    body: dict[str, Any] = {
        "model": payload.model if payload.model is not None else settings.ai_default_model,
        "messages": [message.model_dump() for message in payload.messages],
    }
    for name in CHAT_OPTIONAL_FIELDS:
        value = getattr(payload, name)
        if value is not None:
            body[name] = value

    return UpstreamRequest(
        provider=req.provider,
        method="POST",
        url=settings.ai_service_url,
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        },
        json_body=body,
    )


def _build_geocode(req: ClientRequest, api_key: str, settings: Settings) -> UpstreamRequest:
    payload = cast(GeocodeRequest, req.payload)

    params: dict[str, str | int] = {"q": payload.q, "key": api_key}
    if payload.limit is not None:
        params["limit"] = payload.limit
    if payload.language is not None:
        params["language"] = payload.language

    url = httpx.URL(settings.opencage_url, params=params)
    return UpstreamRequest(provider=req.provider, method="GET", url=str(url))


def _build_generate(req: ClientRequest, api_key: str, settings: Settings) -> UpstreamRequest:
    base = settings.gemini_base_url.rstrip("/")
    url = httpx.URL(f"{base}/{settings.gemini_model}:generateContent", params={"key": api_key})
    return UpstreamRequest(
        provider=req.provider,
        method="POST",
        url=str(url),
        headers={"Content-Type": "application/json"},
        json_body=req.raw,
    )


BUILDERS: dict[ProviderIdentity, Callable[[ClientRequest, str, Settings], UpstreamRequest]] = {
    ProviderIdentity.CHAT_COMPLETION: _build_chat,
    ProviderIdentity.GEOCODE: _build_geocode,
    ProviderIdentity.GENERATIVE_AI: _build_generate,
}


def build_upstream_request(req: ClientRequest, api_key: str, settings: Settings) -> UpstreamRequest:
    """Build the provider wire request for a validated client request.

    Args:
        req: Validated client request.
        api_key: Resolved provider credential.
        settings: Configuration holding upstream URLs and defaults.

    Returns:
        UpstreamRequest with URL, method, headers and body.
    """
    return BUILDERS[req.provider](req, api_key, settings)
