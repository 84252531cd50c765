"""Gateway client request schemas.

One request model per provider. These validate the shape of what the
browser sends before anything is forwarded upstream.

- ChatCompletionRequest: POST /api/details
- GeocodeRequest: GET /api/geocode (query parameters)
- GenerateContentRequest: POST /api/gemini

Emptiness (no messages, blank query, no contents) is not checked here. The
request builder checks it so it can report a provider-specific "empty" code
instead of a generic schema error.
"""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Chat completions
# =============================================================================


class ChatMessage(BaseModel):
    """One chat turn."""

    role: str
    content: str


class ChatCompletionRequest(BaseModel):
    """Chat completion request.

    Optional sampling fields are forwarded only when present.
    Unknown fields are dropped.
    """

    model: str | None = None
    messages: list[ChatMessage]
    max_tokens: int | None = Field(default=None, ge=0)
    temperature: float | None = None
    top_p: float | None = None
    stream: bool | None = None

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Geocoding
# =============================================================================


class GeocodeRequest(BaseModel):
    """Forward geocoding (or reverse, with "lat,lng" as q) request."""

    q: str = ""
    limit: int | None = Field(default=None, ge=0)
    language: str | None = None

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Generative AI
# =============================================================================


class GeminiPart(BaseModel):
    """One content part. Only text parts are accepted."""

    text: str

    model_config = ConfigDict(extra="allow")


class GeminiContent(BaseModel):
    """One content block."""

    role: str
    parts: list[GeminiPart]

    model_config = ConfigDict(extra="allow")


class GeminiGenerationConfig(BaseModel):
    """Generation parameters, camelCase on the wire."""

    temperature: float | None = None
    max_output_tokens: int | None = Field(default=None, alias="maxOutputTokens", ge=0)
    response_mime_type: str | None = Field(default=None, alias="responseMimeType")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class GenerateContentRequest(BaseModel):
    """Generate content request.

    Validation only: the body sent upstream is the client's original JSON,
    not a re-serialization of this model.
    """

    contents: list[GeminiContent]
    generation_config: GeminiGenerationConfig | None = Field(
        default=None, alias="generationConfig"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)
