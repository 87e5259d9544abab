"""
Analysis orchestrator.

Chooses how a token gets analysed (heuristics, Claude or OpenAI) from the
agent configuration read at call time, and always returns a valid
``AnalysisResult``.  No error raised while talking to a provider reaches
the caller; the heuristic analysis is returned instead.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping, Optional

import anthropic
import httpx
import openai

from .heuristics import compute_defaults
from .logging_config import mint_ctx
from .models import AgentConfig, AnalysisResult, DataPoint, Strategy
from .providers import ProviderError, complete_with_claude, complete_with_openai
from .reconciler import parse_orchestrator_response

logger = logging.getLogger(__name__)

ProviderCall = Callable[[DataPoint, str], Awaitable[str]]

DEFAULT_PROVIDERS: dict[Strategy, ProviderCall] = {
    Strategy.CLAUDE: complete_with_claude,
    Strategy.CODEX: complete_with_openai,
}

# Failures a provider call is expected to produce; anything else gets a traceback
_PROVIDER_ERRORS = (ProviderError, anthropic.APIError, openai.APIError, httpx.HTTPError)


class Orchestrator:
    """Dispatch an analysis to the configured strategy.

    Parameters
    ----------
    get_config:
        Accessor returning the current ``AgentConfig``; called once per
        ``analyze`` so setting changes apply to the next analysis.
    providers:
        Strategy → completion function.  Defaults to the real SDK adapters.
    """

    def __init__(
        self,
        get_config: Callable[[], AgentConfig],
        providers: Optional[Mapping[Strategy, ProviderCall]] = None,
    ) -> None:
        self._get_config = get_config
        self._providers = dict(DEFAULT_PROVIDERS if providers is None else providers)

    async def analyze(self, dp: DataPoint) -> AnalysisResult:
        """Return an analysis of *dp*; never raises."""
        token = mint_ctx.set(dp.mint[:12])
        try:
            return await self._analyze(dp)
        except _PROVIDER_ERRORS as exc:
            logger.error(
                "[orchestrator] AI analysis failed, falling back to heuristics: %s: %s",
                type(exc).__name__, exc,
            )
            return compute_defaults(dp)
        except Exception as exc:
            logger.exception(
                "[orchestrator] unexpected %s, falling back to heuristics", type(exc).__name__
            )
            return compute_defaults(dp)
        finally:
            mint_ctx.reset(token)

    async def _analyze(self, dp: DataPoint) -> AnalysisResult:
        cfg = self._get_config()
        strategy = cfg.orchestrator

        if strategy is Strategy.MANUAL:
            return compute_defaults(dp)

        if strategy is Strategy.CLAUDE or strategy is Strategy.CODEX:
            api_key = cfg.credential_for(strategy)
            if not api_key:
                logger.warning(
                    "[orchestrator] No %s API key configured, using heuristics", strategy.value
                )
                return compute_defaults(dp)
            provider = self._providers[strategy]
            raw = await provider(dp, api_key)
            return parse_orchestrator_response(raw, dp)

        raise ValueError(f"unhandled strategy {strategy!r}")
