"""Gateway operations: one per provider, one shared skeleton.

A request moves through four stages, never re-entering one:

    VALIDATING -> CREDENTIAL_RESOLVING -> INVOKING -> TRANSLATING

Any stage may stop the request with a GatewayError. Validation failures and
absent credentials stop it before the invoker is called. Every exception
leaving run() is a GatewayError.

Observability:
- gateway.request.started / gateway.request.finished / gateway.request.failed
- All fields go through safe_kv(); payload text, queries and keys are never
  logged, only sizes and counts.
"""

import time
from typing import Any, Protocol

import httpx

from riskmap.config import Settings
from riskmap.gateway.builders import ClientRequest, build_upstream_request, parse_client_request
from riskmap.gateway.credentials import AbsentCredential, resolve_credential
from riskmap.gateway.errors import PROVIDER_TEXT, GatewayError, absent_credential_error
from riskmap.gateway.invoker import UpstreamInvoker
from riskmap.gateway.translator import translate
from riskmap.gateway.types import (
    GatewayStage,
    PassthroughBody,
    ProviderIdentity,
    UpstreamOutcome,
    UpstreamRequest,
)
from riskmap.logging import get_logger, set_provider
from riskmap.redact import safe_kv
from riskmap.schemas.gateway import (
    ChatCompletionRequest,
    GenerateContentRequest,
    GeocodeRequest,
)

logger = get_logger(__name__)


class Invoker(Protocol):
    """Anything that can send an UpstreamRequest."""

    async def invoke(self, req: UpstreamRequest) -> UpstreamOutcome: ...


def _request_size_fields(req: ClientRequest) -> dict[str, Any]:
    """Safe size metrics for a validated request."""
    payload = req.payload
    if isinstance(payload, ChatCompletionRequest):
        return {
            "message_count": len(payload.messages),
            "message_chars": sum(len(m.content) for m in payload.messages),
            "streaming": bool(payload.stream),
        }
    if isinstance(payload, GeocodeRequest):
        return {"query_chars": len(payload.q), "limit": payload.limit}
    if isinstance(payload, GenerateContentRequest):
        return {
            "content_count": len(payload.contents),
            "part_chars": sum(len(p.text) for c in payload.contents for p in c.parts),
        }
    return {}


class GatewayOperation:
    """Validate, resolve credential, invoke, translate, for one provider."""

    def __init__(self, provider: ProviderIdentity, settings: Settings, invoker: Invoker):
        """Initialize operation.

        Args:
            provider: Provider this operation forwards to.
            settings: Configuration built once at startup.
            invoker: Sends the built request upstream.
        """
        self.provider = provider
        self._settings = settings
        self._invoker = invoker

    def _resolve_credential(self) -> str:
        try:
            return resolve_credential(self._settings, self.provider)
        except AbsentCredential as e:
            text = PROVIDER_TEXT[self.provider]
            raise absent_credential_error(text.prefix, text.key_label, e.env_name, e.reason) from e

    async def run(self, raw: Any) -> PassthroughBody:
        """Forward one client request.

        Args:
            raw: Decoded JSON body, or query parameters for geocoding.

        Returns:
            The upstream success body, unchanged.

        Raises:
            GatewayError: On any failure.
        """
        set_provider(self.provider.value)
        stage = GatewayStage.VALIDATING
        start = time.monotonic()

        try:
            client_request = parse_client_request(self.provider, raw)

            stage = GatewayStage.CREDENTIAL_RESOLVING
            api_key = self._resolve_credential()
            upstream_request = build_upstream_request(client_request, api_key, self._settings)

            stage = GatewayStage.INVOKING
            logger.info(
                "gateway.request.started",
                **safe_kv(
                    provider=self.provider.value,
                    method=upstream_request.method,
                    **_request_size_fields(client_request),
                ),
            )
            outcome = await self._invoker.invoke(upstream_request)

            stage = GatewayStage.TRANSLATING
            body = translate(self.provider, outcome)

        except GatewayError as e:
            self._log_failure(e, stage, start)
            raise

        except Exception as e:
            logger.exception(
                "gateway.request.crashed",
                **safe_kv(provider=self.provider.value, stage=stage.value),
            )
            error = GatewayError(
                500,
                "Internal gateway error",
                f"Unexpected error: {type(e).__name__}",
                f"{PROVIDER_TEXT[self.provider].prefix}_INTERNAL_ERROR",
            )
            self._log_failure(error, stage, start)
            raise error from e

        logger.info(
            "gateway.request.finished",
            **safe_kv(
                provider=self.provider.value,
                outcome="success",
                latency_ms=_elapsed_ms(start),
                response_length=len(body.raw),
            ),
        )
        return body

    def _log_failure(self, error: GatewayError, stage: GatewayStage, start: float) -> None:
        log = logger.warning if stage == GatewayStage.VALIDATING else logger.error
        log(
            "gateway.request.failed",
            **safe_kv(
                provider=self.provider.value,
                outcome="error",
                stage=stage.value,
                code=error.code,
                http_status=error.http_status,
                upstream_status=error.upstream_status,
                latency_ms=_elapsed_ms(start),
            ),
        )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class Gateway:
    """The three gateway operations behind one object.

    Created once in the application lifespan with the shared HTTP client and
    the startup Settings. Holds no per-request state.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        *,
        invoker: Invoker | None = None,
    ):
        """Initialize gateway.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            settings: Configuration built once at startup.
            invoker: Override the upstream invoker (tests).
        """
        self._settings = settings
        self._invoker = invoker or UpstreamInvoker(
            client,
            timeout_s=settings.upstream_timeout_s,
            connect_timeout_s=settings.upstream_connect_timeout_s,
        )
        self._operations = {
            provider: GatewayOperation(provider, settings, self._invoker)
            for provider in ProviderIdentity
        }

    @property
    def settings(self) -> Settings:
        return self._settings

    def operation(self, provider: ProviderIdentity) -> GatewayOperation:
        """Get the operation for a provider."""
        return self._operations[provider]

    async def chat(self, payload: Any) -> PassthroughBody:
        """Forward a chat completion request."""
        return await self.operation(ProviderIdentity.CHAT_COMPLETION).run(payload)

    async def geocode(self, params: Any) -> PassthroughBody:
        """Forward a geocoding request."""
        return await self.operation(ProviderIdentity.GEOCODE).run(params)

    async def generate(self, payload: Any) -> PassthroughBody:
        """Forward a generate-content request."""
        return await self.operation(ProviderIdentity.GENERATIVE_AI).run(payload)
