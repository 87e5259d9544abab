"""
Pydantic models used throughout the Pump Studio trainer.

Wire names are camelCase (the platform and the desktop UI both speak it);
Python attributes are snake_case.  Every model accepts either spelling on
input and serialises with aliases.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import MAX_RISK_FACTORS, SCORE_MAX, SCORE_MIN

logger = logging.getLogger(__name__)

Sentiment = Literal["bullish", "bearish", "neutral"]
RiskLevel = Literal["critical", "high", "medium", "low"]
LiquidityDepth = Literal["deep", "moderate", "shallow", "dry"]
HolderConcentration = Literal["distributed", "moderate", "concentrated", "whale_dominated"]
TrendDirection = Literal["up", "down", "sideways", "reversal"]
VolumeProfile = Literal["surging", "rising", "stable", "declining", "dead"]
RiskFactor = Literal[
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
]
TrainingStep = Literal["fetching", "analyzing", "submitting", "done", "error"]


# ---------------------------------------------------------------------------
# Token snapshot  (the analysis input)
# ---------------------------------------------------------------------------
class DataPoint(BaseModel):
    """Point-in-time market state of one token, as served by ``/datapoint``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    mint: str = Field(..., description="Solana mint address")
    name: str = Field("", description="Human-readable token name")
    symbol: str = Field("", description="Ticker / symbol")
    image_uri: Optional[str] = Field(None, alias="imageUri")
    description: Optional[str] = Field(None, description="Creator-supplied description")
    price_usd: float = Field(0.0, alias="priceUsd")
    market_cap: float = Field(0.0, alias="marketCap")
    volume_24h: float = Field(0.0, alias="volume24h")
    liquidity: float = Field(0.0, description="Pool liquidity in USD")
    holder_count: int = Field(0, alias="holderCount")
    top10_holder_pct: float = Field(0.0, alias="top10HolderPct")
    buys_24h: int = Field(0, alias="buys24h")
    sells_24h: int = Field(0, alias="sells24h")
    bonding_progress: float = Field(0.0, alias="bondingProgress")
    price_change_24h: float = Field(0.0, alias="priceChange24h")
    bonding_complete: bool = Field(False, alias="bondingComplete")
    is_currently_live: bool = Field(False, alias="isCurrentlyLive")

    @field_validator(
        "price_usd",
        "market_cap",
        "volume_24h",
        "liquidity",
        "top10_holder_pct",
        "bonding_progress",
        "price_change_24h",
    )
    @classmethod
    def _finite_metric(cls, value: float) -> float:
        # heuristics compare and round these; NaN/inf become 0
        if not math.isfinite(value):
            logger.debug("non-finite metric %r coerced to 0", value)
            return 0.0
        return value

    @field_validator("holder_count", "buys_24h", "sells_24h", mode="before")
    @classmethod
    def _finite_count(cls, value: Any) -> Any:
        # the data API sometimes sends fractional counts
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else 0
        return value


# ---------------------------------------------------------------------------
# Analysis result  (the core output)
# ---------------------------------------------------------------------------
class AnalysisResult(BaseModel):
    """Structured analysis of one token; every field is domain-checked."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sentiment: Sentiment
    score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    summary: str = Field(..., min_length=1)
    risk_level: RiskLevel = Field(..., alias="riskLevel")
    risk_factors: list[RiskFactor] = Field(
        ..., alias="riskFactors", min_length=1, max_length=MAX_RISK_FACTORS
    )
    buy_pressure: int = Field(..., alias="buyPressure", ge=SCORE_MIN, le=SCORE_MAX)
    volatility_score: int = Field(..., alias="volatilityScore", ge=SCORE_MIN, le=SCORE_MAX)
    liquidity_depth: LiquidityDepth = Field(..., alias="liquidityDepth")
    holder_concentration: HolderConcentration = Field(..., alias="holderConcentration")
    trend_direction: TrendDirection = Field(..., alias="trendDirection")
    volume_profile: VolumeProfile = Field(..., alias="volumeProfile")


# ---------------------------------------------------------------------------
# Agent configuration
# ---------------------------------------------------------------------------
class Strategy(str, Enum):
    """Which engine produces an analysis."""

    MANUAL = "manual"
    CLAUDE = "claude"
    CODEX = "codex"


class AgentConfig(BaseModel):
    """User settings read by the orchestrator and the trainer."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field("", alias="apiKey", description="Pump Studio API key")
    orchestrator: Strategy = Strategy.MANUAL
    claude_api_key: str = Field("", alias="claudeApiKey")
    codex_api_key: str = Field("", alias="codexApiKey")
    auto_analyze: bool = Field(False, alias="autoAnalyze")
    analyze_interval: int = Field(10, alias="analyzeInterval", ge=1)

    @field_validator("orchestrator", mode="before")
    @classmethod
    def _known_strategy(cls, value: Any) -> Any:
        if isinstance(value, Strategy):
            return value
        try:
            return Strategy(value)
        except ValueError:
            logger.warning("Unknown orchestrator %r – using manual", value)
            return Strategy.MANUAL

    @field_validator("claude_api_key", "codex_api_key", "api_key", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def credential_for(self, strategy: Strategy) -> str:
        """Return the provider key configured for *strategy* (may be empty)."""
        if strategy is Strategy.CLAUDE:
            return self.claude_api_key
        if strategy is Strategy.CODEX:
            return self.codex_api_key
        return ""


# ---------------------------------------------------------------------------
# Platform records
# ---------------------------------------------------------------------------
class MarketToken(BaseModel):
    """A token row from the ``/market`` listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    mint: str
    name: str = ""
    symbol: str = ""
    image_uri: Optional[str] = None
    usd_market_cap: Optional[float] = None
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    is_currently_live: Optional[bool] = None
    complete: Optional[bool] = None
    created_timestamp: Optional[int] = None


class AnalysisSnapshot(BaseModel):
    """Market figures frozen into a submission so the platform can score it."""

    model_config = ConfigDict(populate_by_name=True)

    price_usd: float = Field(..., alias="priceUsd")
    market_cap: float = Field(..., alias="marketCap")
    volume_24h: float = Field(..., alias="volume24h")
    liquidity: float
    holder_count: int = Field(..., alias="holderCount")
    top10_holder_pct: float = Field(..., alias="top10HolderPct")
    buys_24h: int = Field(..., alias="buys24h")
    sells_24h: int = Field(..., alias="sells24h")
    bonding_progress: float = Field(..., alias="bondingProgress")
    snapshot_at: int = Field(..., alias="snapshotAt", description="Epoch milliseconds")


class AnalysisQuant(BaseModel):
    """The quantitative half of a submission."""

    model_config = ConfigDict(populate_by_name=True)

    risk_level: str = Field(..., alias="riskLevel")
    risk_factors: list[str] = Field(..., alias="riskFactors")
    buy_pressure: int = Field(..., alias="buyPressure")
    volatility_score: int = Field(..., alias="volatilityScore")
    liquidity_depth: str = Field(..., alias="liquidityDepth")
    holder_concentration: str = Field(..., alias="holderConcentration")
    trend_direction: str = Field(..., alias="trendDirection")
    volume_profile: str = Field(..., alias="volumeProfile")


class AnalysisPayload(BaseModel):
    """Request body of ``POST /api/v1/analysis/submit``."""

    model_config = ConfigDict(populate_by_name=True)

    mint: str
    sentiment: Sentiment
    score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    summary: str
    snapshot: AnalysisSnapshot
    quant: AnalysisQuant


class SubmitResult(BaseModel):
    """Platform verdict on a submitted analysis."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ok: bool = False
    error: Optional[str] = None
    xp_earned: Optional[int] = Field(None, alias="xpEarned")
    xp_total: Optional[int] = Field(None, alias="xpTotal")
    analysis_id: Optional[str] = Field(None, alias="analysisId")
    validated: Optional[bool] = None
    deviation_pct: Optional[float] = Field(None, alias="deviationPct")
    warning: Optional[str] = None


class LeaderboardEntry(BaseModel):
    """One row of the most-analysed tokens board."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    mint: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    image: Optional[str] = None
    count: int = 0
    last_sentiment: Optional[str] = Field(None, alias="lastSentiment")
    last_score: Optional[int] = Field(None, alias="lastScore")


class AnalysisStats(BaseModel):
    """Platform-wide analysis counters and leaderboard."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ok: bool = False
    total_analyses: int = Field(0, alias="totalAnalyses")
    unique_tokens: int = Field(0, alias="uniqueTokens")
    goal: int = 0
    progress: float = 0.0
    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Auto-training
# ---------------------------------------------------------------------------
class TrainingProgress(BaseModel):
    """One step of the auto-training loop for one mint."""

    model_config = ConfigDict(populate_by_name=True)

    mint: str
    step: TrainingStep
    xp_earned: Optional[int] = Field(None, alias="xpEarned")
    error: Optional[str] = None


class TrainingSummary(BaseModel):
    """Outcome of an auto-training run."""

    model_config = ConfigDict(populate_by_name=True)

    total_xp: int = Field(0, alias="totalXp")
    tokens_analyzed: int = Field(0, alias="tokensAnalyzed")
    cancelled: bool = False


class TrainingRequest(BaseModel):
    """Request body for ``POST /training/start``."""

    mints: list[str] = Field(
        ..., min_length=1, max_length=100, description="1-100 Solana mint addresses"
    )


class AgentConfigUpdate(BaseModel):
    """Request body for ``PUT /config``; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[str] = Field(None, alias="apiKey")
    orchestrator: Optional[str] = None
    claude_api_key: Optional[str] = Field(None, alias="claudeApiKey")
    codex_api_key: Optional[str] = Field(None, alias="codexApiKey")
    auto_analyze: Optional[bool] = Field(None, alias="autoAnalyze")
    analyze_interval: Optional[int] = Field(None, alias="analyzeInterval", ge=1)
