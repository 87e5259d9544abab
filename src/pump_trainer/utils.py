"""
Shared utilities for the Pump Studio trainer.

Consolidates the numeric and text helpers used by the heuristics, the
prompt builder and the CLI:

- ``round_half_up``: half-up integer rounding (Python's ``round`` is banker's)
- ``clamp``: bound a number to an inclusive range
- ``format_compact`` / ``format_usd`` / ``format_thousands`` / ``format_pct``:
  human-readable number rendering
- ``truncate``: shorten text with an ellipsis
- ``mask_secret``: hide a credential for display
"""

from __future__ import annotations

import math


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties going towards +infinity.

    ``round(2.5)`` is 2 in Python; scores and percentages shown to users and
    sent to the platform round 2.5 to 3.
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    """Return *value* bounded to ``[low, high]``."""
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_compact(value: float) -> str:
    """Render a dollar amount as ``1.2M`` / ``3.4K`` / ``56.78`` (no sign)."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:.2f}"


def format_usd(value: float) -> str:
    """Render a price or market cap with a ``$`` prefix.

    Sub-dollar prices keep extra precision so memecoin prices stay readable.
    """
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.1f}K"
    if value >= 1:
        return f"${value:.2f}"
    if value >= 0.01:
        return f"${value:.4f}"
    return f"${value:.6f}"


def format_thousands(value: float) -> str:
    """Group digits with commas; integral floats drop their ``.0``.

    Fractional values keep up to three decimals with trailing zeros removed.
    """
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_pct(value: float) -> str:
    """Signed one-decimal percentage, e.g. ``+12.3%`` / ``-4.0%``."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


def truncate(text: str, length: int) -> str:
    """Shorten *text* to *length* characters, ending with an ellipsis."""
    if len(text) > length:
        return text[: length - 1] + "…"
    return text


def mask_secret(value: str) -> str:
    """Hide all but the last four characters of a credential."""
    if not value:
        return ""
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]
