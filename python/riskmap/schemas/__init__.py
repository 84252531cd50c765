"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from riskmap.schemas.gateway import (
    ChatCompletionRequest,
    ChatMessage,
    GeminiContent,
    GeminiGenerationConfig,
    GeminiPart,
    GenerateContentRequest,
    GeocodeRequest,
)
from riskmap.schemas.search_history import SearchHistoryCreate, SearchHistoryOut

__all__ = [
    # Gateway
    "ChatMessage",
    "ChatCompletionRequest",
    "GeocodeRequest",
    "GeminiPart",
    "GeminiContent",
    "GeminiGenerationConfig",
    "GenerateContentRequest",
    # Search history
    "SearchHistoryCreate",
    "SearchHistoryOut",
]
