"""Application settings loaded from environment variables.

Environment Configuration:
    RISKMAP_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: PostgreSQL connection string (required)

Provider Credentials (all optional, checked per request):
    AI_SERVICE_API_KEY: Chat completions service key (Bearer header)
    OPENCAGE_API_KEY: Geocoding service key (query parameter)
    GEMINI_API_KEY: Generative AI service key (query parameter)
    GOOGLE_MAPS_API_KEY: Browser map widget key (returned by /api/maps/config)

An unset credential and a credential set to "" are kept distinct: the first
is None, the second is the empty string. The gateway reports them with
different machine codes.

Upstream Configuration:
    AI_SERVICE_URL, AI_DEFAULT_MODEL, OPENCAGE_URL, GEMINI_BASE_URL, GEMINI_MODEL
    UPSTREAM_TIMEOUT_S: Total deadline for one upstream call (default 30)
    UPSTREAM_CONNECT_TIMEOUT_S: Connect deadline (default 10)
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - Upstream timeouts must be positive
    - SEARCH_HISTORY_RECENT_LIMIT must be >= 1
    """

    riskmap_env: Environment = Field(default=Environment.LOCAL, alias="RISKMAP_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Provider credentials (None = unset, "" = set but empty)
    ai_service_api_key: str | None = Field(default=None, alias="AI_SERVICE_API_KEY")
    opencage_api_key: str | None = Field(default=None, alias="OPENCAGE_API_KEY")
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    google_maps_api_key: str | None = Field(default=None, alias="GOOGLE_MAPS_API_KEY")

    # Upstream endpoints
    ai_service_url: str = Field(
        default="https://api.perplexity.ai/chat/completions", alias="AI_SERVICE_URL"
    )
    ai_default_model: str = Field(
        default="llama-3.1-sonar-small-128k-online", alias="AI_DEFAULT_MODEL"
    )
    opencage_url: str = Field(
        default="https://api.opencagedata.com/geocode/v1/json", alias="OPENCAGE_URL"
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        alias="GEMINI_BASE_URL",
    )
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")

    # Outbound HTTP deadlines
    upstream_timeout_s: float = Field(default=30.0, alias="UPSTREAM_TIMEOUT_S")
    upstream_connect_timeout_s: float = Field(default=10.0, alias="UPSTREAM_CONNECT_TIMEOUT_S")
    upstream_max_connections: int = Field(default=100, alias="UPSTREAM_MAX_CONNECTIONS")

    # Search history
    search_history_recent_limit: int = Field(default=10, alias="SEARCH_HISTORY_RECENT_LIMIT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject non-positive deadlines and limits."""
        for name in ("upstream_timeout_s", "upstream_connect_timeout_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be > 0")

        if self.upstream_max_connections < 1:
            raise ValueError("UPSTREAM_MAX_CONNECTIONS must be >= 1")

        if self.search_history_recent_limit < 1:
            raise ValueError("SEARCH_HISTORY_RECENT_LIMIT must be >= 1")

        return self

    @property
    def json_logs(self) -> bool:
        """Whether logs should be rendered as JSON (everything except local)."""
        return self.riskmap_env != Environment.LOCAL


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
