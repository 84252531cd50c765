"""Upstream HTTP invocation.

- Exactly one HTTP call per invoke(); no retries. Providers are rate
  limited, and retry policy belongs to the caller. Redirects are followed.
- Never raises for upstream conditions. Every result is an UpstreamOutcome:
  2xx -> UpstreamSuccess, other status -> UpstreamErrorResponse,
  no response -> TransportFailure.
- Every call carries an explicit httpx.Timeout plus an overall deadline
  (timeout_s) covering the whole exchange, body included.
- Cancellation (asyncio.CancelledError) is not caught, so a dropped inbound
  connection cancels the outbound call and releases its pooled connection.

Transport classification:
- httpx.TimeoutException (connect, read, write, pool) or overall deadline -> TIMEOUT
- httpx.ConnectError (refused, DNS, TLS handshake) -> CONNECTION_REFUSED
- anything else -> OTHER
"""

import asyncio

import httpx

from riskmap.gateway.types import (
    TransportFailure,
    TransportFailureKind,
    UpstreamErrorResponse,
    UpstreamOutcome,
    UpstreamRequest,
    UpstreamSuccess,
)
from riskmap.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 30.0
DEFAULT_CONNECT_TIMEOUT_S = 10.0


class UpstreamInvoker:
    """Sends UpstreamRequests over a shared httpx.AsyncClient.

    The client is owned by the application lifespan; the invoker never
    closes it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ):
        """Initialize invoker with shared HTTP client and deadlines.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            timeout_s: Overall deadline for one call, and the per-phase
                read/write/pool deadline.
            connect_timeout_s: Deadline for establishing the connection.
        """
        self._client = client
        self._total_s = timeout_s
        self._timeout = httpx.Timeout(timeout_s, connect=connect_timeout_s)

    async def invoke(self, req: UpstreamRequest) -> UpstreamOutcome:
        """Issue one upstream call and classify the result."""
        try:
            # httpx deadlines are per read; a slow-drip body needs an overall bound
            async with asyncio.timeout(self._total_s):
                response = await self._client.request(
                    req.method,
                    req.url,
                    headers=req.headers or None,
                    json=req.json_body,
                    timeout=self._timeout,
                    follow_redirects=True,
                )
        except httpx.TimeoutException as e:
            return TransportFailure(TransportFailureKind.TIMEOUT, _describe(e))
        except TimeoutError:
            return TransportFailure(
                TransportFailureKind.TIMEOUT, f"No complete response within {self._total_s}s"
            )
        except httpx.ConnectError as e:
            return TransportFailure(TransportFailureKind.CONNECTION_REFUSED, _describe(e))
        except httpx.HTTPError as e:
            return TransportFailure(TransportFailureKind.OTHER, _describe(e))
        except Exception as e:
            logger.warning(
                "gateway.invoke.unexpected_error",
                provider=req.provider.value,
                error_type=type(e).__name__,
            )
            return TransportFailure(
                TransportFailureKind.OTHER, f"Unexpected error: {type(e).__name__}"
            )

        if response.is_success:
            return UpstreamSuccess(status=response.status_code, body=response.content)

        return UpstreamErrorResponse(status=response.status_code, body=_safe_text(response))


def _describe(exc: Exception) -> str:
    """Supplementary failure detail; falls back to the exception type name."""
    text = str(exc)
    return text or type(exc).__name__


def _safe_text(response: httpx.Response) -> str:
    """Decode the response body, falling back when the charset is unusable."""
    try:
        return response.text
    except (LookupError, UnicodeDecodeError):
        return "Unknown error"
