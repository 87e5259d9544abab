"""
AI provider adapters.

Each adapter sends one token snapshot to an LLM and returns the raw text of
its completion.  Validation of that text is the reconciler's job; the
adapters only guarantee they return *some* non-empty text or raise.

- ``complete_with_claude``: Anthropic Messages API (async SDK)
- ``complete_with_openai``: OpenAI Chat Completions API (async SDK)

SDK clients are created per call with the key passed in, so a key changed
in the settings takes effect on the next analysis.
"""

from __future__ import annotations

import logging

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from config import (
    AI_MAX_TOKENS,
    AI_TEMPERATURE,
    ANTHROPIC_MODEL,
    OPENAI_MODEL,
    PROVIDER_TIMEOUT,
)
from .constants import (
    HOLDER_CONCENTRATIONS,
    LIQUIDITY_DEPTHS,
    RISK_FACTOR_VOCABULARY,
    RISK_LEVELS,
    SENTIMENTS,
    TREND_DIRECTIONS,
    VOLUME_PROFILES,
)
from .models import DataPoint
from .utils import format_thousands

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a provider answered but the answer is unusable."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class EmptyCompletionError(ProviderError):
    """The provider response carried no text to analyse."""


# ── System prompt ─────────────────────────────────────────────────────────────

def _choices(values: tuple[str, ...]) -> str:
    return " | ".join(f'"{v}"' for v in values)


SYSTEM_PROMPT = f"""\
You are a Solana memecoin analyst for Pump Studio. You receive a snapshot of \
one token's market data and must return a structured JSON analysis.

Respond with a single JSON object only (no markdown fences, no prose) with \
exactly these fields:

{{
  "sentiment": {_choices(SENTIMENTS)},
  "score": <integer 0-100>,
  "summary": "<2-3 sentence analysis>",
  "riskLevel": {_choices(RISK_LEVELS)},
  "riskFactors": ["<factor>", ...],
  "buyPressure": <integer 0-100>,
  "volatilityScore": <integer 0-100>,
  "liquidityDepth": {_choices(LIQUIDITY_DEPTHS)},
  "holderConcentration": {_choices(HOLDER_CONCENTRATIONS)},
  "trendDirection": {_choices(TREND_DIRECTIONS)},
  "volumeProfile": {_choices(VOLUME_PROFILES)}
}}

Guidelines:
- score: 0 = extremely bearish, 50 = neutral, 100 = extremely bullish.
- riskFactors: 1 to 8 entries chosen from {", ".join(RISK_FACTOR_VOCABULARY)}.
- buyPressure: share of buys among all 24h trades, as a percentage.
- volatilityScore: 0 = stable, 100 = extreme volatility.
- summary: concise and data-driven, cite the key metrics, no hype or speculation.
- Be skeptical of very high holder concentration, very low liquidity and \
volume that looks inconsistent with liquidity.\
"""


# ── User prompt ───────────────────────────────────────────────────────────────

def build_user_prompt(dp: DataPoint) -> str:
    """Render the snapshot as labelled lines for the model."""
    total = dp.buys_24h + dp.sells_24h
    buy_ratio = f"{dp.buys_24h / total * 100:.1f}%" if total > 0 else "N/A"
    sign = "+" if dp.price_change_24h >= 0 else ""

    lines = [
        "Analyze this Solana token:",
        "",
        f"Token: {dp.name} (${dp.symbol})",
        f"Mint: {dp.mint}",
        f"Price: ${dp.price_usd}",
        f"24h Change: {sign}{dp.price_change_24h:.2f}%",
        f"Market Cap: ${format_thousands(dp.market_cap)}",
        f"24h Volume: ${format_thousands(dp.volume_24h)}",
        f"Liquidity: ${format_thousands(dp.liquidity)}",
        f"Holders: {format_thousands(dp.holder_count)}",
        f"Top 10 Holder %: {dp.top10_holder_pct:.1f}%",
        f"24h Buys: {dp.buys_24h}",
        f"24h Sells: {dp.sells_24h}",
        f"Buy Ratio: {buy_ratio}",
        f"Bonding Progress: {dp.bonding_progress:.1f}%",
        f"Bonding Complete: {str(dp.bonding_complete).lower()}",
        f"Currently Live: {str(dp.is_currently_live).lower()}",
    ]
    if dp.description:
        lines.append(f"Description: {dp.description}")
    return "\n".join(lines)


# ── Anthropic ─────────────────────────────────────────────────────────────────

async def complete_with_claude(dp: DataPoint, api_key: str) -> str:
    """Return the concatenated text blocks of a Claude completion."""
    async with AsyncAnthropic(api_key=api_key, timeout=PROVIDER_TIMEOUT) as client:
        message = await client.messages.create(
            model=ANTHROPIC_MODEL,
            max_tokens=AI_MAX_TOKENS,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_user_prompt(dp)}],
        )

    blocks = message.content or []
    text = "".join(
        getattr(block, "text", "") or ""
        for block in blocks
        if getattr(block, "type", None) == "text"
    )
    if not text.strip():
        raise EmptyCompletionError("claude", "response carried no text content")

    usage = getattr(message, "usage", None)
    if usage is not None:
        logger.info(
            "[providers] claude %s | model=%s input_tokens=%s output_tokens=%s",
            dp.mint[:12], ANTHROPIC_MODEL,
            getattr(usage, "input_tokens", "?"), getattr(usage, "output_tokens", "?"),
        )
    return text


# ── OpenAI ────────────────────────────────────────────────────────────────────

async def complete_with_openai(dp: DataPoint, api_key: str) -> str:
    """Return the first choice's message content of a chat completion."""
    async with AsyncOpenAI(api_key=api_key, timeout=PROVIDER_TIMEOUT) as client:
        response = await client.chat.completions.create(
            model=OPENAI_MODEL,
            temperature=AI_TEMPERATURE,
            max_tokens=AI_MAX_TOKENS,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(dp)},
            ],
        )

    choices = response.choices or []
    text = choices[0].message.content if choices else None
    if not text or not text.strip():
        raise EmptyCompletionError("codex", "response carried no message content")

    usage = getattr(response, "usage", None)
    if usage is not None:
        logger.info(
            "[providers] codex %s | model=%s prompt_tokens=%s completion_tokens=%s",
            dp.mint[:12], OPENAI_MODEL,
            getattr(usage, "prompt_tokens", "?"), getattr(usage, "completion_tokens", "?"),
        )
    return text
