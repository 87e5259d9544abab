"""
Async HTTP request helper with retry and exponential backoff.

Used by the Pump Studio client for every call so retry/backoff logic lives
in one place.  Unlike a best-effort fetch, the final failure is re-raised:
callers surface it to the user (the trainer logs it per token, the API maps
it to a 502).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

# Statuses worth another attempt; everything else ≥ 400 fails immediately.
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


def _parse_retry_after(resp: httpx.Response, default: float) -> float:
    """Extract wait time from a ``Retry-After`` header, or use *default*.

    The header may be an integer (seconds) or an HTTP-date.  We only handle
    the integer form since that's what most APIs emit.
    """
    raw = resp.headers.get("retry-after")
    if raw is not None:
        try:
            return max(float(raw), 0.5)
        except (ValueError, TypeError):
            pass
    return default


async def async_request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    json_payload: Any = None,
    headers: Optional[dict[str, str]] = None,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    label: str = "HTTP",
) -> Any:
    """Send a request and return the parsed JSON body.

    Retries on 429 (honouring ``Retry-After``), 5xx and transport errors, up
    to *max_retries* attempts in total.  Raises ``httpx.HTTPStatusError`` for
    a final non-2xx response and ``httpx.RequestError`` for a final transport
    failure.
    """
    for attempt in range(max_retries):
        last_attempt = attempt == max_retries - 1
        try:
            resp = await client.request(
                method, url, params=params, json=json_payload, headers=headers
            )
            if resp.status_code in RETRYABLE_STATUSES and not last_attempt:
                wait = backoff_base * (2 ** attempt)
                if resp.status_code == 429:
                    wait = _parse_retry_after(resp, wait)
                logger.warning(
                    "%s %s %s returned %d, retry in %.1fs",
                    label, method, url, resp.status_code, wait,
                )
                await asyncio.sleep(wait)
                continue
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("%s HTTP %s for %s %s", label, exc.response.status_code, method, url)
            raise
        except httpx.RequestError as exc:
            logger.warning("%s request failed: %s %s – %s", label, method, url, exc)
            if last_attempt:
                raise
            await asyncio.sleep(backoff_base * (2 ** attempt))
    raise RuntimeError(f"{label}: max_retries must be at least 1")
