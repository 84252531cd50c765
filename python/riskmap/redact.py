"""Log guard utilities.

- safe_kv: log guard that blocks forbidden keys at call site

Never-log policy:
- Provider API keys
- Upstream URLs that embed a key in the query string
- Chat message content and generation prompts
- Raw geocoding queries
- Upstream response bodies

Allowed (with suffix):
- _chars, _length: length of text
- _sha256, _hash: hash of text
- Counts, status codes, latency, machine codes
"""

import os

FORBIDDEN_KEYS = frozenset(
    {
        "prompt",
        "content",
        "contents",
        "messages",
        "query",
        "q",
        "api_key",
        "key",
        "credential",
        "bearer",
        "token",
        "secret",
        "url",
        "raw_body",
        "body",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars")


def _has_redacted_suffix(key: str) -> bool:
    """Check if key ends with a recognized redacted suffix."""
    return any(key.endswith(suffix) for suffix in REDACTED_SUFFIXES)


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Raises ValueError in local/test environments if a forbidden key is used
    without a redacted suffix. In staging/prod, logs a warning instead.

    Usage:
        logger.info("gateway.request.started", **safe_kv(
            provider="geocode",
            query_chars=12,          # OK: _chars suffix
            # query="10 Downing St", # BLOCKED: forbidden key
        ))

    Args:
        _env: Override for RISKMAP_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.

    Raises:
        ValueError: In local/test, if a forbidden key is used without redacted suffix.
    """
    violations = []
    for key in kwargs:
        if key in FORBIDDEN_KEYS and not _has_redacted_suffix(key):
            violations.append(key)

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("RISKMAP_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        else:
            import structlog

            _logger = structlog.get_logger("riskmap.redact")
            _logger.warning("safe_kv_violation", forbidden_keys=violations)

    return kwargs
