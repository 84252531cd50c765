"""Test helpers for settings, upstream stubs and gateway assertions.

Provides:
- make_settings: Settings with test defaults + overrides, no .env lookup
- Upstream URLs matching the test settings
- RecordingInvoker: spy invoker that counts calls
"""

from riskmap.config import Settings
from riskmap.gateway.types import UpstreamOutcome, UpstreamRequest, UpstreamSuccess

TEST_AI_KEY = "ai-test-key"
TEST_OPENCAGE_KEY = "opencage-test-key"
TEST_GEMINI_KEY = "gemini-test-key"
TEST_MAPS_KEY = "maps-test-key"

AI_URL = "https://ai.test/chat/completions"
OPENCAGE_URL = "https://geocode.test/geocode/v1/json"
GEMINI_BASE_URL = "https://gemini.test/v1beta/models"
GEMINI_MODEL = "gemini-test"
GEMINI_URL = f"{GEMINI_BASE_URL}/{GEMINI_MODEL}:generateContent"


def make_settings(
    ai_key=TEST_AI_KEY,
    opencage_key=TEST_OPENCAGE_KEY,
    gemini_key=TEST_GEMINI_KEY,
    maps_key=TEST_MAPS_KEY,
    **overrides,
) -> Settings:
    """Build a Settings instance with test defaults + overrides.

    Pass None for a credential to leave it unset, "" to set it empty.
    """
    defaults = {
        "RISKMAP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "AI_SERVICE_API_KEY": ai_key,
        "OPENCAGE_API_KEY": opencage_key,
        "GEMINI_API_KEY": gemini_key,
        "GOOGLE_MAPS_API_KEY": maps_key,
        "AI_SERVICE_URL": AI_URL,
        "OPENCAGE_URL": OPENCAGE_URL,
        "GEMINI_BASE_URL": GEMINI_BASE_URL,
        "GEMINI_MODEL": GEMINI_MODEL,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def valid_payload(provider: str) -> dict:
    """A minimal valid client payload for a provider ("chat", "geocode", "generate")."""
    if provider == "chat":
        return {"messages": [{"role": "user", "content": "Is this area prone to flooding?"}]}
    if provider == "geocode":
        return {"q": "Lisbon", "limit": "1"}
    return {"contents": [{"role": "user", "parts": [{"text": "Summarize the risks."}]}]}


def empty_payload(provider: str) -> dict:
    """A payload whose required input is empty."""
    if provider == "chat":
        return {"messages": []}
    if provider == "geocode":
        return {"q": "   "}
    return {"contents": []}


class RecordingInvoker:
    """Invoker spy: records every request and returns a fixed outcome."""

    def __init__(self, outcome: UpstreamOutcome | None = None):
        self.outcome = outcome or UpstreamSuccess(status=200, body=b'{"ok": true}')
        self.calls: list[UpstreamRequest] = []

    async def invoke(self, req: UpstreamRequest) -> UpstreamOutcome:
        self.calls.append(req)
        return self.outcome
