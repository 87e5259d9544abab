"""
Project configuration file for the Pump Studio trainer.

This module centralises all user-modifiable settings such as API keys,
endpoints, model names, timeouts and other options.  You can edit these
values directly or set environment variables to override them.

Per-user agent settings (selected orchestrator, provider keys, training
interval) live in the JSON file handled by ``pump_trainer.config_store``;
the values here only seed its defaults.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _read_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logger.error("Invalid value for %s: %r, falling back to %s", name, raw, default)
        return cast(default)


def _parse_float(name: str, default: str, *, low: float = 0.0, high: float = 1.0) -> float:
    """Read *name* as a float, clamped to ``[low, high]``."""
    value = _read_number(name, default, float)
    if not low <= value <= high:
        logger.warning("%s=%s outside [%s, %s], clamping", name, value, low, high)
        value = min(max(value, low), high)
    return value


def _parse_int(name: str, default: str, *, minimum: int = 1) -> int:
    """Read *name* as an int no smaller than *minimum*."""
    value = _read_number(name, default, int)
    if value < minimum:
        logger.warning("%s=%d below minimum %d, using the minimum", name, value, minimum)
        value = minimum
    return value


# ---------------------------------------------------------------------------
# Pump Studio platform
# ---------------------------------------------------------------------------
PUMP_STUDIO_BASE_URL: str = os.getenv(
    "PUMP_STUDIO_BASE_URL",
    "https://api.pump.studio",
)
PUMP_STUDIO_API_KEY: str = os.getenv("PUMP_STUDIO_API_KEY", "")

# ---------------------------------------------------------------------------
# AI providers
# ---------------------------------------------------------------------------
ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")
AI_MAX_TOKENS: int = _parse_int("AI_MAX_TOKENS", "1024", minimum=64)
AI_TEMPERATURE: float = _parse_float("AI_TEMPERATURE", "0.3", low=0.0, high=2.0)
PROVIDER_TIMEOUT: float = _parse_float("PROVIDER_TIMEOUT", "60", low=1.0, high=600.0)

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT: int = _parse_int("REQUEST_TIMEOUT", "15", minimum=1)
HTTP_MAX_RETRIES: int = _parse_int("HTTP_MAX_RETRIES", "3", minimum=1)

# ---------------------------------------------------------------------------
# Auto-training
# ---------------------------------------------------------------------------
# The platform rejects submissions arriving faster than this.
MIN_TRAINING_DELAY_SECONDS: float = _parse_float(
    "MIN_TRAINING_DELAY_SECONDS", "6", low=0.0, high=3600.0
)
DEFAULT_ANALYZE_INTERVAL: int = _parse_int("DEFAULT_ANALYZE_INTERVAL", "10", minimum=1)
AGENT_CONFIG_PATH: str = os.getenv(
    "AGENT_CONFIG_PATH",
    os.path.join(os.path.expanduser("~"), ".pump-studio", "trainer.json"),
)

# ---------------------------------------------------------------------------
# Rate limiting (slowapi format, e.g. "10/minute")
# ---------------------------------------------------------------------------
RATE_LIMIT_ANALYSIS: str = os.getenv("RATE_LIMIT_ANALYSIS", "30/minute")

# ---------------------------------------------------------------------------
# Sentry (error tracking)
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_TRACES_SAMPLE_RATE: float = _parse_float(
    "SENTRY_TRACES_SAMPLE_RATE", "0.1", low=0.0, high=1.0
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = _parse_int("API_PORT", "8765", minimum=1)
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if o.strip()
]
