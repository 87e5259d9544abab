"""
Command line interface for the Pump Studio trainer.

Usage::

    python src/main.py --mint <TOKEN_MINT> [--json] [--submit]
    python src/main.py --train <MINT> [<MINT> ...]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import os

# Ensure ``src/`` is on the import path
sys.path.insert(0, os.path.dirname(__file__))

from pump_trainer.data_sources._clients import (
    close_clients,
    get_config_store,
    get_orchestrator,
    get_pump_client,
)
from pump_trainer.data_sources.pump_studio import PumpStudioAPIError
from pump_trainer.logging_config import setup_logging
from pump_trainer.models import AnalysisResult, DataPoint, TrainingProgress
from pump_trainer.trainer import CancellationToken, build_payload, run_training
from pump_trainer.utils import format_pct, format_usd, truncate

logger = logging.getLogger("main")


def _print_analysis(dp: DataPoint, result: AnalysisResult, strategy: str) -> None:
    print("=" * 60)
    print("  Pump Studio Trainer – Analysis")
    print("=" * 60)
    print(f"  Token        : {dp.name or 'Unknown'} (${dp.symbol or '?'})")
    print(f"  Mint         : {dp.mint[:12]}…")
    print(f"  Price        : {format_usd(dp.price_usd)}  ({format_pct(dp.price_change_24h)})")
    print(f"  Market Cap   : {format_usd(dp.market_cap)}")
    print(f"  Strategy     : {strategy}")
    print("-" * 60)
    print(f"  Sentiment    : {result.sentiment}  (score {result.score}/100)")
    print(f"  Risk         : {result.risk_level}  [{', '.join(result.risk_factors)}]")
    print(f"  Buy Pressure : {result.buy_pressure}   Volatility: {result.volatility_score}")
    print(f"  Liquidity    : {result.liquidity_depth}   Holders: {result.holder_concentration}")
    print(f"  Trend        : {result.trend_direction}   Volume: {result.volume_profile}")
    print("-" * 60)
    print(f"  {truncate(result.summary, 280)}")
    print("=" * 60)


async def _analyse(mint: str, as_json: bool, submit: bool) -> int:
    """Fetch, analyse and optionally submit a single token."""
    client = get_pump_client()
    try:
        dp = await client.get_data_point(mint)
        result = await get_orchestrator().analyze(dp)

        if as_json:
            print(result.model_dump_json(by_alias=True, indent=2))
        else:
            _print_analysis(dp, result, get_config_store().get().orchestrator.value)

        if submit:
            verdict = await client.submit_analysis(build_payload(dp, result))
            if as_json:
                print(verdict.model_dump_json(by_alias=True, exclude_none=True, indent=2))
            elif verdict.ok:
                print(f"  Submitted: +{verdict.xp_earned or 0} XP")
            else:
                print(f"  Submission rejected: {verdict.error or 'unknown reason'}")
    except PumpStudioAPIError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await close_clients()
    return 0


def _print_progress(event: TrainingProgress) -> None:
    line = f"  {event.mint[:12]}…  {event.step}"
    if event.step == "done":
        line += f"  +{event.xp_earned or 0} XP"
    elif event.step == "error":
        line += f"  ({event.error})"
    print(line)


async def _train(mints: list[str]) -> int:
    """Run the batch trainer; Ctrl-C stops it between tokens."""
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except NotImplementedError:
        logger.debug("Signal handlers unavailable; Ctrl-C will abort immediately")

    try:
        summary = await run_training(
            mints,
            client=get_pump_client(),
            orchestrator=get_orchestrator(),
            get_config=get_config_store().get,
            token=token,
            on_progress=_print_progress,
        )
    finally:
        await close_clients()

    print("=" * 60)
    status = "cancelled" if summary.cancelled else "complete"
    print(f"  Training {status}: {summary.tokens_analyzed} tokens, {summary.total_xp} XP")
    print("=" * 60)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Analyse Pump Studio tokens and submit the analyses"
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--mint",
        help="Mint address of the token to analyse",
    )
    mode.add_argument(
        "--train",
        nargs="+",
        metavar="MINT",
        help="Auto-train over the given mint addresses",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Output result as raw JSON",
    )
    parser.add_argument(
        "--submit",
        action="store_true",
        help="Submit the analysis to Pump Studio",
    )
    args = parser.parse_args(argv)

    setup_logging()
    if args.train:
        return asyncio.run(_train(args.train))
    return asyncio.run(_analyse(args.mint, args.as_json, args.submit))


if __name__ == "__main__":
    sys.exit(main())
