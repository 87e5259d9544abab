"""
REST API for the Pump Studio trainer using FastAPI.

Endpoints
---------
GET  /health                 - Health check
GET  /market                 - Token listing (proxied from Pump Studio)
GET  /datapoint?mint=<MINT>  - Market snapshot for one token
GET  /analysis/stats         - Platform analysis counters and leaderboard
GET  /context?mint=<MINT>    - Free-text context for a token
POST /analysis/orchestrate   - Analyse a snapshot with the configured strategy
POST /analysis/submit        - Submit an analysis for scoring
GET  /config                 - Current agent settings (credentials masked)
PUT  /config                 - Update agent settings
POST /training/start         - Start a background auto-training run
POST /training/stop          - Cancel the running auto-training run
GET  /training/status        - Progress log and summary of the last run

Security features:
- Rate limiting via slowapi (per-IP)
- Base58 mint address validation
- Internal error details hidden from clients
- Graceful startup/shutdown of HTTP clients
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Optional, TypeVar

import sentry_sdk
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from config import (
    API_HOST,
    API_PORT,
    CORS_ORIGINS,
    RATE_LIMIT_ANALYSIS,
    SENTRY_DSN,
    SENTRY_ENVIRONMENT,
    SENTRY_TRACES_SAMPLE_RATE,
)
from .data_sources._clients import (
    close_clients,
    get_config_store,
    get_orchestrator,
    get_pump_client,
    init_clients,
)
from .data_sources.pump_studio import PumpStudioAPIError
from .logging_config import generate_request_id, request_id_ctx, setup_logging
from .models import (
    AgentConfig,
    AgentConfigUpdate,
    AnalysisPayload,
    AnalysisResult,
    AnalysisStats,
    DataPoint,
    MarketToken,
    SubmitResult,
    TrainingProgress,
    TrainingRequest,
    TrainingSummary,
)
from .trainer import CancellationToken, run_training
from .utils import mask_secret

# Initialise structured logging early
setup_logging()
logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Sentry – initialise before anything else so startup errors are captured
# ---------------------------------------------------------------------------
def _drop_client_errors(event, hint):
    """Sentry ``before_send`` hook: 4xx HTTPExceptions are not reported."""
    exc = (hint.get("exc_info") or (None, None, None))[1]
    if isinstance(exc, HTTPException) and (exc.status_code or 500) < 500:
        return None
    return event


if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
        before_send=_drop_client_errors,
    )
    logger.info("Sentry initialised (env=%s)", SENTRY_ENVIRONMENT)
else:
    logger.info("SENTRY_DSN not set – error tracking disabled")

_start_time = time.monotonic()

# Solana addresses are 32-44 base58 chars
_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

_MASKED_FIELDS = ("apiKey", "claudeApiKey", "codexApiKey")


# ---------------------------------------------------------------------------
# Auto-training state (one run at a time)
# ---------------------------------------------------------------------------
_training_task: Optional[asyncio.Task] = None
_training_token: Optional[CancellationToken] = None
_training_events: deque[TrainingProgress] = deque(maxlen=100)
_training_summary: Optional[TrainingSummary] = None


def _training_active() -> bool:
    return _training_task is not None and not _training_task.done()


async def _training_job(mints: list[str], token: CancellationToken) -> None:
    global _training_summary
    try:
        _training_summary = await run_training(
            mints,
            client=get_pump_client(),
            orchestrator=get_orchestrator(),
            get_config=get_config_store().get,
            token=token,
            on_progress=_training_events.append,
        )
    except asyncio.CancelledError:
        logger.info("Training task cancelled")
        raise
    except Exception:
        logger.exception("Training run crashed")


async def _stop_training() -> None:
    if _training_token is not None:
        _training_token.cancel()
    if _training_task is not None and not _training_task.done():
        _training_task.cancel()
        try:
            await _training_task
        except asyncio.CancelledError:
            pass


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Initialise shared clients on startup, close on shutdown."""
    logger.info("Starting up – initialising clients …")
    await init_clients()
    yield
    logger.info("Shutting down – stopping training and closing clients …")
    await _stop_training()
    await close_clients()


app = FastAPI(
    title="Pump Studio Trainer API",
    description="Analyse Pump Studio tokens with heuristics, Claude or OpenAI and submit the results.",
    version="1.0.0",
    lifespan=lifespan,
)

# Attach rate-limiter state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS (so the desktop UI dev server can call the API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Accept"],
)


# ---------------------------------------------------------------------------
# Request-ID & access-log middleware
# ---------------------------------------------------------------------------
class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request for tracing."""

    async def dispatch(self, request: Request, call_next):
        rid = generate_request_id()
        request_id_ctx.set(rid)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = rid
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(RequestIdMiddleware)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _require_mint(mint: str) -> None:
    if not mint or not _BASE58_RE.match(mint):
        raise HTTPException(
            status_code=400,
            detail="Invalid Solana mint address. Expected 32-44 base58 characters.",
        )


async def _upstream(label: str, call: Awaitable[T]) -> T:
    """Await a platform call, mapping failures to 502 / 500."""
    try:
        return await call
    except PumpStudioAPIError as exc:
        logger.warning("%s failed upstream: %s", label, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("%s failed", label)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


def _public_config(cfg: AgentConfig) -> dict[str, Any]:
    data = cfg.model_dump(mode="json", by_alias=True)
    for key in _MASKED_FIELDS:
        data[key] = mask_secret(data[key])
    return data


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@app.get("/", tags=["system"], include_in_schema=False)
async def root():
    """Redirect to Swagger UI."""
    return RedirectResponse(url="/docs")


@app.get("/health", tags=["system"])
async def health() -> dict:
    """Health check including uptime, active strategy and training state."""
    return {
        "status": "ok",
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
        "orchestrator": get_config_store().get().orchestrator.value,
        "training": _training_active(),
    }


@app.get("/market", response_model=list[MarketToken], tags=["platform"])
async def market(
    tab: str = Query("all", description="all / live / new / graduated"),
    limit: int = Query(50, ge=1, le=200, description="Max tokens to return"),
) -> list[MarketToken]:
    return await _upstream("Market fetch", get_pump_client().get_market(tab, limit))


@app.get("/datapoint", response_model=DataPoint, tags=["platform"])
async def datapoint(
    mint: str = Query(..., description="Solana mint address of the token"),
) -> DataPoint:
    """Return the market snapshot the analysis is computed from."""
    _require_mint(mint)
    return await _upstream("DataPoint fetch", get_pump_client().get_data_point(mint))


@app.get("/analysis/stats", response_model=AnalysisStats, tags=["platform"])
async def analysis_stats(
    limit: int = Query(10, ge=1, le=100, description="Leaderboard size"),
) -> AnalysisStats:
    return await _upstream("Stats fetch", get_pump_client().get_analysis_stats(limit))


@app.get("/context", tags=["platform"])
async def context(
    mint: str = Query(..., description="Solana mint address of the token"),
) -> dict:
    _require_mint(mint)
    text = await _upstream("Context fetch", get_pump_client().get_context(mint))
    return {"mint": mint, "context": text}


@app.post("/analysis/orchestrate", response_model=AnalysisResult, tags=["analysis"])
@limiter.limit(RATE_LIMIT_ANALYSIS)
async def orchestrate(request: Request, body: DataPoint) -> AnalysisResult:
    """Analyse *body* with the configured strategy; falls back to heuristics."""
    _require_mint(body.mint)
    return await get_orchestrator().analyze(body)


@app.post("/analysis/submit", response_model=SubmitResult, tags=["analysis"])
@limiter.limit(RATE_LIMIT_ANALYSIS)
async def submit(request: Request, body: AnalysisPayload) -> SubmitResult:
    _require_mint(body.mint)
    return await _upstream("Submit", get_pump_client().submit_analysis(body))


@app.get("/config", tags=["config"])
async def read_config() -> dict:
    """Return the agent settings with credentials masked."""
    return _public_config(get_config_store().get())


@app.put("/config", tags=["config"])
async def update_config(body: AgentConfigUpdate) -> dict:
    """Merge the fields sent into the stored settings.

    Fields sent as ``null`` leave the stored value unchanged, and so does a
    masked credential sent back as it was read.
    """
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True, by_alias=True).items()
        if value is not None
    }
    for key in _MASKED_FIELDS:
        if str(changes.get(key, "")).startswith("****"):
            del changes[key]
    return _public_config(get_config_store().save(changes))


@app.post("/training/start", status_code=202, tags=["training"])
async def training_start(body: TrainingRequest) -> dict:
    """Start an auto-training run over *mints* in the background."""
    global _training_task, _training_token, _training_summary
    if _training_active():
        raise HTTPException(status_code=409, detail="A training run is already active")
    for mint in body.mints:
        if not _BASE58_RE.match(mint):
            raise HTTPException(status_code=400, detail=f"Invalid mint address: {mint}")

    _training_events.clear()
    _training_summary = None
    _training_token = CancellationToken()
    _training_task = asyncio.create_task(
        _training_job(list(body.mints), _training_token), name="auto_training"
    )
    logger.info("Auto-training started for %d tokens", len(body.mints))
    return {"started": True, "tokens": len(body.mints)}


@app.post("/training/stop", tags=["training"])
async def training_stop() -> dict:
    """Cancel the running auto-training run.

    The run stops before its next token; a wait between tokens ends at once.
    """
    if not _training_active() or _training_token is None:
        return {"stopping": False}
    _training_token.cancel()
    logger.info("Auto-training stop requested")
    return {"stopping": True}


@app.get("/training/status", tags=["training"])
async def training_status() -> dict:
    return {
        "running": _training_active(),
        "events": [e.model_dump(mode="json", by_alias=True) for e in _training_events],
        "summary": (
            _training_summary.model_dump(mode="json", by_alias=True)
            if _training_summary is not None
            else None
        ),
    }


# ------------------------------------------------------------------
# Run with: python -m pump_trainer.api  (from src/)
# ------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pump_trainer.api:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
