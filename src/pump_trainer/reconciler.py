"""
Provider response reconciliation.

Turns the free-form text an AI provider returned into a valid
``AnalysisResult``.  Provider output is never trusted as a whole:

- text that is not a JSON object → the full heuristic analysis
- a JSON object → each field is checked on its own; any missing or
  out-of-domain field is replaced by the heuristic value for that field
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Callable, Optional, Sequence

from .constants import (
    HOLDER_CONCENTRATIONS,
    LIQUIDITY_DEPTHS,
    MAX_RISK_FACTORS,
    RISK_FACTOR_VOCABULARY,
    RISK_LEVELS,
    SCORE_MAX,
    SCORE_MIN,
    SENTIMENTS,
    TREND_DIRECTIONS,
    VOLUME_PROFILES,
)
from .heuristics import compute_defaults
from .models import AnalysisResult, DataPoint
from .utils import clamp, round_half_up

logger = logging.getLogger(__name__)

_OPENING_FENCE_RE = re.compile(r"^```[\w+-]*\s*")
_CLOSING_FENCE_RE = re.compile(r"\s*```$")


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence (``json`` tag optional)."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned


def parse_orchestrator_response(raw: str, dp: DataPoint) -> AnalysisResult:
    """Reconcile provider text with the heuristic analysis of *dp*."""
    defaults = compute_defaults(dp)

    try:
        parsed = json.loads(strip_code_fences(raw))
    except (ValueError, TypeError, AttributeError, RecursionError):
        logger.warning(
            "[reconciler] JSON parse failed for %s, raw=%s", dp.mint[:12], str(raw)[:200]
        )
        return defaults

    if not isinstance(parsed, dict):
        logger.warning(
            "[reconciler] expected a JSON object for %s, got %s",
            dp.mint[:12], type(parsed).__name__,
        )
        return defaults

    def field(key: str, check: Callable[[Any], Optional[Any]], fallback: Any) -> Any:
        value = check(parsed.get(key))
        if value is None:
            logger.debug("[reconciler] %s=%r rejected, using heuristic", key, parsed.get(key))
            return fallback
        return value

    return AnalysisResult(
        sentiment=field("sentiment", _one_of(SENTIMENTS), defaults.sentiment),
        score=field("score", validate_number, defaults.score),
        summary=field("summary", validate_summary, defaults.summary),
        risk_level=field("riskLevel", _one_of(RISK_LEVELS), defaults.risk_level),
        risk_factors=field("riskFactors", validate_risk_factors, defaults.risk_factors),
        buy_pressure=field("buyPressure", validate_number, defaults.buy_pressure),
        volatility_score=field("volatilityScore", validate_number, defaults.volatility_score),
        liquidity_depth=field(
            "liquidityDepth", _one_of(LIQUIDITY_DEPTHS), defaults.liquidity_depth
        ),
        holder_concentration=field(
            "holderConcentration", _one_of(HOLDER_CONCENTRATIONS), defaults.holder_concentration
        ),
        trend_direction=field(
            "trendDirection", _one_of(TREND_DIRECTIONS), defaults.trend_direction
        ),
        volume_profile=field(
            "volumeProfile", _one_of(VOLUME_PROFILES), defaults.volume_profile
        ),
    )


# ---------------------------------------------------------------------------
# Per-field validators: each returns the accepted value or None
# ---------------------------------------------------------------------------

def validate_enum(value: Any, allowed: Sequence[str]) -> Optional[str]:
    if isinstance(value, str) and value in allowed:
        return value
    return None


def validate_number(
    value: Any,
    *,
    low: int = SCORE_MIN,
    high: int = SCORE_MAX,
) -> Optional[int]:
    """Accept any real number, clamped to ``[low, high]`` and rounded."""
    # bool is an int subclass but true/false is not a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return round_half_up(clamp(value, low, high))


def validate_summary(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def validate_risk_factors(value: Any) -> Optional[list[str]]:
    """Accept a non-empty list whose first 8 entries are all known risk tags."""
    if not isinstance(value, list) or not value:
        return None
    head = value[:MAX_RISK_FACTORS]
    if not all(isinstance(tag, str) and tag in RISK_FACTOR_VOCABULARY for tag in head):
        return None
    return head


def _one_of(allowed: Sequence[str]) -> Callable[[Any], Optional[str]]:
    return lambda value: validate_enum(value, allowed)
