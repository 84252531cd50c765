"""Gateway proxy routes.

Route handlers only decode the request and hand it to the Gateway; all
validation, credential, upstream and error logic lives in riskmap.gateway.

- POST /api/details: Chat completions
- GET /api/geocode?q=&limit=&language=: Geocoding
- POST /api/gemini: Generative AI
- GET /api/maps/config: Browser map widget key

Success: the provider's JSON, unmodified.
Failure: {"error": "...", "message": "...", "code": "...", "status"?: int}
(GatewayError, serialized by riskmap.responses.gateway_error_handler)
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response

from riskmap.api.deps import get_app_settings, get_gateway
from riskmap.config import Settings
from riskmap.gateway import Gateway, ProviderIdentity
from riskmap.gateway.credentials import MAPS_CREDENTIAL, AbsentCredential, read_credential
from riskmap.gateway.errors import absent_credential_error, invalid_input_error
from riskmap.logging import get_logger
from riskmap.responses import passthrough_response

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["gateway"])

GATEWAY_PATH_PREFIX = "/api/"


async def _read_json_body(request: Request, provider: ProviderIdentity) -> Any:
    """Decode the JSON body, reporting malformed JSON as a gateway input error."""
    raw = await request.body()
    if not raw:
        raise invalid_input_error(provider, "Request body is required")
    try:
        return json.loads(raw)
    except ValueError as e:
        raise invalid_input_error(provider, "Malformed JSON body") from e


@router.post("/details")
async def chat_completion(
    request: Request,
    gateway: Annotated[Gateway, Depends(get_gateway)],
) -> Response:
    """Forward a chat completion request to the AI service."""
    payload = await _read_json_body(request, ProviderIdentity.CHAT_COMPLETION)
    body = await gateway.chat(payload)
    return passthrough_response(body)


@router.get("/geocode")
async def geocode(
    request: Request,
    gateway: Annotated[Gateway, Depends(get_gateway)],
) -> Response:
    """Forward a geocoding query to OpenCage."""
    body = await gateway.geocode(dict(request.query_params))
    return passthrough_response(body)


@router.post("/gemini")
async def generate_content(
    request: Request,
    gateway: Annotated[Gateway, Depends(get_gateway)],
) -> Response:
    """Forward a generate-content request to Gemini."""
    payload = await _read_json_body(request, ProviderIdentity.GENERATIVE_AI)
    body = await gateway.generate(payload)
    return passthrough_response(body)


@router.get("/maps/config")
def maps_config(settings: Annotated[Settings, Depends(get_app_settings)]) -> dict:
    """Return the browser map widget key.

    Same missing/empty semantics as the provider credentials, with the
    MAPS_KEY_MISSING / MAPS_KEY_EMPTY codes.
    """
    try:
        api_key = read_credential(settings, MAPS_CREDENTIAL)
    except AbsentCredential as e:
        logger.error("maps_config.key_absent", reason=e.reason.value)
        raise absent_credential_error("MAPS", "Google Maps", e.env_name, e.reason) from e

    return {"apiKey": api_key}
