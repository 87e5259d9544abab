"""
Batch auto-training loop.

For each mint: fetch the snapshot, analyse it with the orchestrator, submit
the analysis to Pump Studio and wait before the next token.  Progress is
reported step by step through a callback; a ``CancellationToken`` stops the
run between tokens (and cuts the inter-token wait short).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from config import MIN_TRAINING_DELAY_SECONDS
from .data_sources.pump_studio import PumpStudioClient
from .heuristics import build_snapshot
from .models import (
    AgentConfig,
    AnalysisPayload,
    AnalysisQuant,
    AnalysisResult,
    DataPoint,
    TrainingProgress,
    TrainingSummary,
)
from .orchestrator import Orchestrator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TrainingProgress], Union[None, Awaitable[None]]]


class CancellationToken:
    """Cooperative stop signal shared by a training run and its owner."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; return True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass
        return self._event.is_set()


def build_payload(
    dp: DataPoint, analysis: AnalysisResult, snapshot_at: Optional[int] = None
) -> AnalysisPayload:
    """Combine a snapshot and its analysis into a submission body."""
    return AnalysisPayload(
        mint=dp.mint,
        sentiment=analysis.sentiment,
        score=analysis.score,
        summary=analysis.summary,
        snapshot=build_snapshot(dp, snapshot_at),
        quant=AnalysisQuant(
            risk_level=analysis.risk_level,
            risk_factors=list(analysis.risk_factors),
            buy_pressure=analysis.buy_pressure,
            volatility_score=analysis.volatility_score,
            liquidity_depth=analysis.liquidity_depth,
            holder_concentration=analysis.holder_concentration,
            trend_direction=analysis.trend_direction,
            volume_profile=analysis.volume_profile,
        ),
    )


async def _emit(on_progress: Optional[ProgressCallback], event: TrainingProgress) -> None:
    if on_progress is None:
        return
    result = on_progress(event)
    if inspect.isawaitable(result):
        await result


async def run_training(
    mints: Iterable[str],
    *,
    client: PumpStudioClient,
    orchestrator: Orchestrator,
    get_config: Callable[[], AgentConfig],
    token: CancellationToken,
    on_progress: Optional[ProgressCallback] = None,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> TrainingSummary:
    """Analyse and submit every mint in order until done or cancelled.

    A failure on one token is reported as an ``error`` step and the run
    moves on to the next token.  *sleep* replaces the cancellable wait
    between tokens (tests pass a no-op).
    """
    total_xp = 0
    analyzed = 0
    mints = list(mints)
    logger.info("[trainer] starting run over %d tokens", len(mints))

    for mint in mints:
        if token.cancelled:
            break
        try:
            await _emit(on_progress, TrainingProgress(mint=mint, step="fetching"))
            dp = await client.get_data_point(mint)

            await _emit(on_progress, TrainingProgress(mint=mint, step="analyzing"))
            analysis = await orchestrator.analyze(dp)

            await _emit(on_progress, TrainingProgress(mint=mint, step="submitting"))
            result = await client.submit_analysis(build_payload(dp, analysis))
        except Exception as exc:
            logger.warning("[trainer] %s failed: %s: %s", mint[:12], type(exc).__name__, exc)
            await _emit(on_progress, TrainingProgress(mint=mint, step="error", error=str(exc)))
            continue

        if result.xp_earned:
            total_xp += result.xp_earned
        analyzed += 1
        await _emit(
            on_progress, TrainingProgress(mint=mint, step="done", xp_earned=result.xp_earned)
        )

        delay = max(float(get_config().analyze_interval), MIN_TRAINING_DELAY_SECONDS)
        if sleep is not None:
            await sleep(delay)
        else:
            await token.wait(delay)

    summary = TrainingSummary(
        total_xp=total_xp, tokens_analyzed=analyzed, cancelled=token.cancelled
    )
    logger.info(
        "[trainer] finished: %d tokens, %d XP%s",
        analyzed, total_xp, " (cancelled)" if summary.cancelled else "",
    )
    return summary
