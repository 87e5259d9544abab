"""
Pump Studio API client.

Endpoints (all under ``/api/v1``):

- ``GET  /market?tab=&limit=``   token listing
- ``GET  /datapoint?mint=``      full market snapshot for one token
- ``GET  /analysis?limit=``      analysis counters and leaderboard
- ``POST /analysis/submit``      submit an analysis, returns XP earned
- ``GET  /chat/context?mint=``   free-text context for a token

Uses ``httpx`` for async HTTP with retry + exponential backoff on reads.
Submissions are sent once: a retried POST could be scored twice.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx

from ..models import AnalysisPayload, AnalysisStats, DataPoint, MarketToken, SubmitResult
from ._retry import async_request_json

logger = logging.getLogger(__name__)

_BACKOFF_BASE = 1.0  # seconds


class PumpStudioAPIError(Exception):
    """A platform call failed after retries (or returned an unusable body)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PumpStudioClient:
    """Async wrapper around the Pump Studio REST API.

    The API key is read through *get_api_key* on every request so that a
    key saved in the settings is picked up without rebuilding the client.
    """

    def __init__(
        self,
        base_url: str,
        get_api_key: Callable[[], str],
        timeout: int = 15,
        max_retries: int = 3,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._get_api_key = get_api_key
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        key = self._get_api_key()
        if key:
            headers["X-API-Key"] = key
            headers["Authorization"] = f"Bearer {key}"
        return headers

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    async def get_market(self, tab: str = "all", limit: int = 50) -> list[MarketToken]:
        """Return the market listing for *tab* (all / live / new / graduated)."""
        data = await self._request(
            "GET", "/api/v1/market", params={"tab": tab, "limit": limit}, label="Market fetch"
        )
        rows = (data.get("tokens") or data.get("items") or []) if isinstance(data, dict) else []
        tokens: list[MarketToken] = []
        for row in rows:
            try:
                tokens.append(MarketToken.model_validate(row))
            except ValueError:
                logger.debug("Skipping malformed market row: %r", row)
        return tokens

    async def get_data_point(self, mint: str) -> DataPoint:
        """Return the analysis snapshot for *mint*."""
        data = await self._request(
            "GET", "/api/v1/datapoint", params={"mint": mint}, label="DataPoint fetch"
        )
        try:
            return DataPoint.model_validate(data)
        except ValueError as exc:
            raise PumpStudioAPIError(f"DataPoint fetch returned an invalid body: {exc}") from exc

    async def get_analysis_stats(self, limit: int = 10) -> AnalysisStats:
        data = await self._request(
            "GET", "/api/v1/analysis", params={"limit": limit}, label="Stats fetch"
        )
        try:
            return AnalysisStats.model_validate(data)
        except ValueError as exc:
            raise PumpStudioAPIError(f"Stats fetch returned an invalid body: {exc}") from exc

    async def submit_analysis(self, payload: AnalysisPayload) -> SubmitResult:
        """Submit *payload* for scoring; never retried."""
        data = await self._request(
            "POST",
            "/api/v1/analysis/submit",
            json_payload=payload.model_dump(mode="json", by_alias=True),
            label="Submit",
            max_retries=1,
        )
        try:
            return SubmitResult.model_validate(data)
        except ValueError as exc:
            raise PumpStudioAPIError(f"Submit returned an invalid body: {exc}") from exc

    async def get_context(self, mint: str) -> str:
        data = await self._request(
            "GET", "/api/v1/chat/context", params={"mint": mint}, label="Context fetch"
        )
        if not isinstance(data, dict):
            return ""
        return data.get("context") or ""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_payload: Any = None,
        label: str,
        max_retries: Optional[int] = None,
    ) -> Any:
        client = await self._get_client()
        try:
            return await async_request_json(
                client,
                method,
                f"{self._base_url}{path}",
                params=params,
                json_payload=json_payload,
                headers=self._headers(),
                max_retries=max_retries or self._max_retries,
                backoff_base=_BACKOFF_BASE,
                label=label,
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            text = exc.response.text[:200]
            raise PumpStudioAPIError(f"{label} failed ({status}): {text}", status) from exc
        except httpx.RequestError as exc:
            raise PumpStudioAPIError(f"{label} failed: {exc}") from exc
        except ValueError as exc:
            raise PumpStudioAPIError(f"{label} returned invalid JSON") from exc
