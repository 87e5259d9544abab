"""
Centralized constants for the Pump Studio trainer.

This file contains:
- The allowed value sets of every enumerated Analysis Result field
- The risk-factor vocabulary shared by the heuristics, the prompt and the
  response validator
- Heuristic thresholds that MUST stay synchronized across modules

Import from this module rather than duplicating values across services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Analysis Result domains
# ---------------------------------------------------------------------------

SENTIMENTS: tuple[str, ...] = ("bullish", "bearish", "neutral")
RISK_LEVELS: tuple[str, ...] = ("critical", "high", "medium", "low")
LIQUIDITY_DEPTHS: tuple[str, ...] = ("deep", "moderate", "shallow", "dry")
HOLDER_CONCENTRATIONS: tuple[str, ...] = (
    "distributed",
    "moderate",
    "concentrated",
    "whale_dominated",
)
TREND_DIRECTIONS: tuple[str, ...] = ("up", "down", "sideways", "reversal")
VOLUME_PROFILES: tuple[str, ...] = ("surging", "rising", "stable", "declining", "dead")

# Every tag a riskFactors entry may carry.  The first nine are produced by
# the heuristic engine; the rest are only reachable through AI output.
RISK_FACTOR_VOCABULARY: tuple[str, ...] = (
    "whale_dominance",
    "high_concentration",
    "low_liquidity",
    "declining_holders",
    "bonding_curve_risk",
    "dead_volume",
    "smart_money_inflow",
    "healthy_distribution",
    "organic_volume",
    "rug_pull_risk",
    "pump_and_dump",
    "wash_trading",
    "dev_selling",
)

MAX_RISK_FACTORS = 8
SCORE_MIN = 0
SCORE_MAX = 100

# ---------------------------------------------------------------------------
# Heuristic thresholds
# ---------------------------------------------------------------------------

# 24h price change (%)
SENTIMENT_CHANGE_PCT = 5.0
TREND_CHANGE_PCT = 10.0

# Top-10 holder share (%)
WHALE_DOMINATED_PCT = 80.0
HIGH_RISK_CONCENTRATION_PCT = 60.0
CONCENTRATED_PCT = 50.0
MEDIUM_RISK_CONCENTRATION_PCT = 40.0
MODERATE_CONCENTRATION_PCT = 30.0

# Liquidity (USD)
DEEP_LIQUIDITY_USD = 100_000.0
MODERATE_LIQUIDITY_USD = 10_000.0
SHALLOW_LIQUIDITY_USD = 1_000.0
LOW_LIQUIDITY_USD = 5_000.0

# Holders
FEW_HOLDERS = 20
THIN_HOLDER_BASE = 50
BROAD_HOLDER_BASE = 500

# 24h volume (USD)
STABLE_VOLUME_USD = 1_000.0
DEAD_VOLUME_USD = 100.0

# Buys must outnumber sells by this factor to count as smart-money inflow
INFLOW_BUY_SELL_RATIO = 3
# Volume above this multiple of liquidity counts as surging / organic
SURGE_VOLUME_LIQUIDITY_RATIO = 2
