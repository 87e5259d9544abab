"""
Deterministic analysis engine.

Derives every Analysis Result field from a ``DataPoint`` using fixed
thresholds, so a well-formed analysis exists even when no AI provider is
configured or reachable.  Every function is pure: same snapshot in, same
value out.

Field rules (Δ = 24h price change %, top10 = top-10 holder share %):

  sentiment        Δ > 5 → bullish, Δ < -5 → bearish, else neutral
  score            50 + 2Δ, clamped to 0-100
  riskLevel        top10 > 80 or liquidity < $1K → critical
                   top10 > 60 or < 20 holders   → high
                   top10 > 40                   → medium, else low
  trendDirection   Δ > 10 → up, Δ < -10 → down, else sideways
  liquidityDepth   > $100K deep, > $10K moderate, > $1K shallow, else dry
  buyPressure      share of buys among 24h trades (50 when no trades)
  volatilityScore  2·|Δ|, capped at 100

``reversal`` is never produced here; only an AI (or a human) can call one.
"""

from __future__ import annotations

import time
from typing import Optional

from .constants import (
    BROAD_HOLDER_BASE,
    CONCENTRATED_PCT,
    DEAD_VOLUME_USD,
    DEEP_LIQUIDITY_USD,
    FEW_HOLDERS,
    HIGH_RISK_CONCENTRATION_PCT,
    INFLOW_BUY_SELL_RATIO,
    LOW_LIQUIDITY_USD,
    MAX_RISK_FACTORS,
    MEDIUM_RISK_CONCENTRATION_PCT,
    MODERATE_CONCENTRATION_PCT,
    MODERATE_LIQUIDITY_USD,
    SCORE_MAX,
    SCORE_MIN,
    SENTIMENT_CHANGE_PCT,
    SHALLOW_LIQUIDITY_USD,
    STABLE_VOLUME_USD,
    SURGE_VOLUME_LIQUIDITY_RATIO,
    THIN_HOLDER_BASE,
    TREND_CHANGE_PCT,
    WHALE_DOMINATED_PCT,
)
from .models import (
    AnalysisResult,
    AnalysisSnapshot,
    DataPoint,
    HolderConcentration,
    LiquidityDepth,
    RiskLevel,
    Sentiment,
    TrendDirection,
    VolumeProfile,
)
from .utils import clamp, format_compact, format_thousands, round_half_up


def default_sentiment(dp: DataPoint) -> Sentiment:
    if dp.price_change_24h > SENTIMENT_CHANGE_PCT:
        return "bullish"
    if dp.price_change_24h < -SENTIMENT_CHANGE_PCT:
        return "bearish"
    return "neutral"


def default_score(dp: DataPoint) -> int:
    """50 is neutral; every 1% of 24h change moves the score by 2 points."""
    return round_half_up(clamp(50 + dp.price_change_24h * 2, SCORE_MIN, SCORE_MAX))


def default_risk_level(dp: DataPoint) -> RiskLevel:
    if dp.top10_holder_pct > WHALE_DOMINATED_PCT or dp.liquidity < SHALLOW_LIQUIDITY_USD:
        return "critical"
    if dp.top10_holder_pct > HIGH_RISK_CONCENTRATION_PCT or dp.holder_count < FEW_HOLDERS:
        return "high"
    if dp.top10_holder_pct > MEDIUM_RISK_CONCENTRATION_PCT:
        return "medium"
    return "low"


def default_risk_factors(dp: DataPoint) -> list[str]:
    """Collect every matching risk tag, in a fixed order.

    A snapshot matching nothing is tagged ``healthy_distribution`` so the
    list is never empty.
    """
    factors: list[str] = []
    if dp.top10_holder_pct > WHALE_DOMINATED_PCT:
        factors.append("whale_dominance")
    if dp.top10_holder_pct > CONCENTRATED_PCT:
        factors.append("high_concentration")
    if dp.liquidity < LOW_LIQUIDITY_USD:
        factors.append("low_liquidity")
    if dp.holder_count < THIN_HOLDER_BASE:
        factors.append("declining_holders")
    if not dp.bonding_complete:
        factors.append("bonding_curve_risk")
    if dp.volume_24h < DEAD_VOLUME_USD:
        factors.append("dead_volume")
    if dp.buys_24h > dp.sells_24h * INFLOW_BUY_SELL_RATIO:
        factors.append("smart_money_inflow")
    if dp.holder_count > BROAD_HOLDER_BASE and dp.top10_holder_pct < MODERATE_CONCENTRATION_PCT:
        factors.append("healthy_distribution")
    if dp.volume_24h > dp.liquidity * SURGE_VOLUME_LIQUIDITY_RATIO:
        factors.append("organic_volume")
    if not factors:
        factors.append("healthy_distribution")
    return factors[:MAX_RISK_FACTORS]


def default_holder_concentration(dp: DataPoint) -> HolderConcentration:
    if dp.top10_holder_pct > WHALE_DOMINATED_PCT:
        return "whale_dominated"
    if dp.top10_holder_pct > CONCENTRATED_PCT:
        return "concentrated"
    if dp.top10_holder_pct > MODERATE_CONCENTRATION_PCT:
        return "moderate"
    return "distributed"


def default_trend_direction(dp: DataPoint) -> TrendDirection:
    if dp.price_change_24h > TREND_CHANGE_PCT:
        return "up"
    if dp.price_change_24h < -TREND_CHANGE_PCT:
        return "down"
    return "sideways"


def default_volume_profile(dp: DataPoint) -> VolumeProfile:
    """Volume relative to liquidity first, then absolute 24h volume."""
    if dp.liquidity > 0 and dp.volume_24h > dp.liquidity * SURGE_VOLUME_LIQUIDITY_RATIO:
        return "surging"
    if dp.liquidity > 0 and dp.volume_24h > dp.liquidity:
        return "rising"
    if dp.volume_24h > STABLE_VOLUME_USD:
        return "stable"
    if dp.volume_24h > DEAD_VOLUME_USD:
        return "declining"
    return "dead"


def default_liquidity_depth(dp: DataPoint) -> LiquidityDepth:
    if dp.liquidity > DEEP_LIQUIDITY_USD:
        return "deep"
    if dp.liquidity > MODERATE_LIQUIDITY_USD:
        return "moderate"
    if dp.liquidity > SHALLOW_LIQUIDITY_USD:
        return "shallow"
    return "dry"


def default_buy_pressure(dp: DataPoint) -> int:
    total = dp.buys_24h + dp.sells_24h
    if total == 0:
        return 50
    # negative counts can push the ratio outside 0-100
    return round_half_up(clamp(dp.buys_24h / total * 100, SCORE_MIN, SCORE_MAX))


def default_volatility_score(dp: DataPoint) -> int:
    return round_half_up(min(SCORE_MAX, abs(dp.price_change_24h) * 2))


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def build_default_summary(dp: DataPoint) -> str:
    """Compose a short, data-driven paragraph describing the snapshot.

    Sentences, in order: headline (symbol, sentiment, risk), 24h price move,
    volume vs liquidity, holder distribution, trend (skipped when sideways),
    bonding-curve progress (skipped once bonding completed).
    """
    sentiment = default_sentiment(dp)
    risk = default_risk_level(dp)
    trend = default_trend_direction(dp)
    volume = default_volume_profile(dp)
    holders = default_holder_concentration(dp)
    depth = default_liquidity_depth(dp)

    direction = "up" if dp.price_change_24h >= 0 else "down"
    parts = [
        f"{dp.symbol} is {sentiment} with a {risk} risk profile.",
        f"Price {direction} {abs(dp.price_change_24h):.1f}% over 24h.",
        f"Volume is {volume} (${format_compact(dp.volume_24h)}) against "
        f"{depth} liquidity (${format_compact(dp.liquidity)}).",
        f"{format_thousands(dp.holder_count)} holders with {holders} concentration "
        f"(top 10 hold {dp.top10_holder_pct:.1f}%).",
    ]
    if trend != "sideways":
        parts.append(f"Trend direction: {trend}.")
    if not dp.bonding_complete:
        parts.append(f"Bonding curve at {dp.bonding_progress:.1f}%.")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def compute_defaults(dp: DataPoint) -> AnalysisResult:
    """Return the full heuristic ``AnalysisResult`` for *dp*."""
    return AnalysisResult(
        sentiment=default_sentiment(dp),
        score=default_score(dp),
        summary=build_default_summary(dp),
        risk_level=default_risk_level(dp),
        risk_factors=default_risk_factors(dp),
        buy_pressure=default_buy_pressure(dp),
        volatility_score=default_volatility_score(dp),
        liquidity_depth=default_liquidity_depth(dp),
        holder_concentration=default_holder_concentration(dp),
        trend_direction=default_trend_direction(dp),
        volume_profile=default_volume_profile(dp),
    )


def build_snapshot(dp: DataPoint, snapshot_at: Optional[int] = None) -> AnalysisSnapshot:
    """Freeze the scored market figures of *dp* for a submission."""
    if snapshot_at is None:
        snapshot_at = int(time.time() * 1000)
    return AnalysisSnapshot(
        price_usd=dp.price_usd,
        market_cap=dp.market_cap,
        volume_24h=dp.volume_24h,
        liquidity=dp.liquidity,
        holder_count=dp.holder_count,
        top10_holder_pct=dp.top10_holder_pct,
        buys_24h=dp.buys_24h,
        sells_24h=dp.sells_24h,
        bonding_progress=dp.bonding_progress,
        snapshot_at=snapshot_at,
    )
