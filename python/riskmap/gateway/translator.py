"""Upstream outcome translation.

Maps each UpstreamOutcome to either a PassthroughBody or a GatewayError:

- UpstreamSuccess: body must parse as JSON, else <PREFIX>_PARSE_ERROR (502).
  On success the original bytes are returned untouched.
- UpstreamErrorResponse: provider status looked up in that provider's status
  table; HTTP status mirrored; upstream body text kept verbatim in `message`.
- TransportFailure: 503 with <PREFIX>_TIMEOUT / _CONNECTION_ERROR / _SERVICE_ERROR.
"""

import json

from riskmap.gateway.errors import parse_error, transport_error, upstream_status_error
from riskmap.gateway.types import (
    PassthroughBody,
    ProviderIdentity,
    TransportFailure,
    UpstreamErrorResponse,
    UpstreamOutcome,
    UpstreamSuccess,
)


def translate(provider: ProviderIdentity, outcome: UpstreamOutcome) -> PassthroughBody:
    """Translate one upstream outcome.

    Args:
        provider: Provider the outcome came from (selects the status table).
        outcome: Result of the upstream invocation.

    Returns:
        PassthroughBody for a 2xx response with a JSON body.

    Raises:
        GatewayError: For every other outcome.
    """
    if isinstance(outcome, UpstreamSuccess):
        try:
            data = json.loads(outcome.body)
        except ValueError as e:
            raise parse_error(provider) from e
        return PassthroughBody(raw=outcome.body, data=data)

    if isinstance(outcome, UpstreamErrorResponse):
        raise upstream_status_error(provider, outcome.status, outcome.body)

    if isinstance(outcome, TransportFailure):
        raise transport_error(provider, outcome.kind, outcome.detail)

    raise TypeError(f"Unknown upstream outcome: {type(outcome).__name__}")
