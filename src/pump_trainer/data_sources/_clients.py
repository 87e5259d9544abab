"""
Singleton service management for the Pump Studio trainer.

Provides the lazily-created config store, platform client and orchestrator
shared by the API and the CLI.  The platform client and the orchestrator
read the config through the store on every call, so saved settings apply
immediately.

``init_clients`` / ``close_clients`` should be called at app startup/shutdown.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config_store import ConfigStore
from ..data_sources.pump_studio import PumpStudioClient
from ..orchestrator import Orchestrator
from config import HTTP_MAX_RETRIES, PUMP_STUDIO_BASE_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singletons (created once, reused)
# ---------------------------------------------------------------------------
_config_store: Optional[ConfigStore] = None
_pump_client: Optional[PumpStudioClient] = None
_orchestrator: Optional[Orchestrator] = None


def get_config_store() -> ConfigStore:
    global _config_store
    if _config_store is None:
        _config_store = ConfigStore()
        logger.info("Agent config loaded from %s", _config_store.path)
    return _config_store


def get_pump_client() -> PumpStudioClient:
    global _pump_client
    if _pump_client is None:
        store = get_config_store()
        _pump_client = PumpStudioClient(
            base_url=PUMP_STUDIO_BASE_URL,
            get_api_key=lambda: store.get().api_key,
            timeout=REQUEST_TIMEOUT,
            max_retries=HTTP_MAX_RETRIES,
        )
    return _pump_client


def get_orchestrator() -> Orchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator(get_config=get_config_store().get)
    return _orchestrator


async def init_clients() -> None:
    """Eagerly create the singletons (called at startup)."""
    get_config_store()
    get_pump_client()
    get_orchestrator()


async def close_clients() -> None:
    """Close the platform HTTP client gracefully (called at shutdown)."""
    global _pump_client, _orchestrator
    if _pump_client is not None:
        await _pump_client.close()
        _pump_client = None
    _orchestrator = None
