"""Shared test fixtures for the Pump Studio trainer test suite."""

from __future__ import annotations

import sys
import os

# Ensure src/ is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from pump_trainer.models import DataPoint

MINT = "7dmpjtmtkRNumctHAGbTrP4MQPHjX59M54aZAbvzpump"
MINT_2 = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def datapoint_payload():
    """A ``/datapoint`` response body for a fresh, risky pump.fun token."""
    return {
        "mint": MINT,
        "name": "Risky Cat",
        "symbol": "RCAT",
        "imageUri": "https://example.com/rcat.png",
        "description": "the cat that took the risk",
        "priceUsd": 0.0000123,
        "marketCap": 12_300.0,
        "volume24h": 50.0,
        "liquidity": 500.0,
        "holderCount": 15,
        "top10HolderPct": 85.0,
        "buys24h": 2,
        "sells24h": 1,
        "bondingProgress": 42.5,
        "priceChange24h": 12.0,
        "bondingComplete": False,
        "isCurrentlyLive": True,
    }


@pytest.fixture
def risky_dp(datapoint_payload):
    return DataPoint.model_validate(datapoint_payload)


@pytest.fixture
def healthy_dp():
    """A graduated token with broad distribution and deep liquidity."""
    return DataPoint(
        mint=MINT_2,
        name="Bonk",
        symbol="BONK",
        price_usd=0.00002,
        market_cap=1_500_000_000.0,
        volume_24h=250_000.0,
        liquidity=2_000_000.0,
        holder_count=12_000,
        top10_holder_pct=18.0,
        buys_24h=900,
        sells_24h=850,
        bonding_progress=100.0,
        price_change_24h=-2.0,
        bonding_complete=True,
        is_currently_live=False,
    )


@pytest.fixture
def valid_ai_response():
    """A complete, in-domain provider answer."""
    return {
        "sentiment": "bearish",
        "score": 22,
        "summary": "Top holders control most of the supply and liquidity is thin.",
        "riskLevel": "high",
        "riskFactors": ["rug_pull_risk", "whale_dominance"],
        "buyPressure": 35,
        "volatilityScore": 80,
        "liquidityDepth": "shallow",
        "holderConcentration": "concentrated",
        "trendDirection": "reversal",
        "volumeProfile": "declining",
    }
