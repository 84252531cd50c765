"""Provider credential resolution.

Each provider reads exactly one configuration value; no two providers share
a key. The Settings object is built once at startup and handed to the
gateway, but the presence check runs on every request so that a missing key
only breaks the operations of its own provider.

"Unset" and "set but empty" are different operator mistakes and are
reported with different machine codes (<PREFIX>_KEY_MISSING vs
<PREFIX>_KEY_EMPTY).
"""

from dataclasses import dataclass

from riskmap.config import Settings
from riskmap.gateway.types import AbsentReason, ProviderIdentity


@dataclass(frozen=True)
class CredentialSource:
    """Where a credential lives.

    Attributes:
        env_name: Environment variable name (used in operator-facing messages)
        settings_field: Attribute on Settings holding the value
    """

    env_name: str
    settings_field: str


CREDENTIAL_SOURCES: dict[ProviderIdentity, CredentialSource] = {
    ProviderIdentity.CHAT_COMPLETION: CredentialSource("AI_SERVICE_API_KEY", "ai_service_api_key"),
    ProviderIdentity.GEOCODE: CredentialSource("OPENCAGE_API_KEY", "opencage_api_key"),
    ProviderIdentity.GENERATIVE_AI: CredentialSource("GEMINI_API_KEY", "gemini_api_key"),
}

MAPS_CREDENTIAL = CredentialSource("GOOGLE_MAPS_API_KEY", "google_maps_api_key")


class AbsentCredential(Exception):
    """Raised when a credential is unset or empty.

    Never carries the credential value itself.

    Attributes:
        env_name: The variable that was checked
        reason: MISSING or EMPTY
    """

    def __init__(self, env_name: str, reason: AbsentReason):
        self.env_name = env_name
        self.reason = reason
        super().__init__(f"{env_name} is {reason.value}")


def read_credential(settings: Settings, source: CredentialSource) -> str:
    """Read one credential from settings.

    Raises:
        AbsentCredential: If the value is unset (MISSING) or zero-length (EMPTY).
    """
    value = getattr(settings, source.settings_field)
    if value is None:
        raise AbsentCredential(source.env_name, AbsentReason.MISSING)
    if value == "":
        raise AbsentCredential(source.env_name, AbsentReason.EMPTY)
    return value


def resolve_credential(settings: Settings, provider: ProviderIdentity) -> str:
    """Resolve the API key for a provider.

    Args:
        settings: Process-wide configuration.
        provider: Provider whose key is needed.

    Returns:
        The credential string.

    Raises:
        AbsentCredential: If the key is unset or empty.
    """
    return read_credential(settings, CREDENTIAL_SOURCES[provider])

