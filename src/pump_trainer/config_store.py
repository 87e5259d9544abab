"""
Persistent agent configuration.

Settings live in a small JSON file (``~/.pump-studio/trainer.json`` by
default).  Defaults are seeded from the environment so a fresh install
picks up ``PUMP_STUDIO_API_KEY`` / ``ANTHROPIC_API_KEY`` / ``OPENAI_API_KEY``
without any setup.  Neither loading nor saving ever raises: a broken file
is logged and the defaults are used instead.
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Any, Mapping, Optional

from config import (
    AGENT_CONFIG_PATH,
    ANTHROPIC_API_KEY,
    DEFAULT_ANALYZE_INTERVAL,
    OPENAI_API_KEY,
    PUMP_STUDIO_API_KEY,
)
from .models import AgentConfig

logger = logging.getLogger(__name__)


def default_config() -> AgentConfig:
    return AgentConfig(
        api_key=PUMP_STUDIO_API_KEY,
        orchestrator="manual",
        claude_api_key=ANTHROPIC_API_KEY,
        codex_api_key=OPENAI_API_KEY,
        auto_analyze=False,
        analyze_interval=DEFAULT_ANALYZE_INTERVAL,
    )


def _to_wire_keys(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Map snake_case field names in *partial* to their camelCase aliases."""
    aliases = {
        name: (info.alias or name) for name, info in AgentConfig.model_fields.items()
    }
    return {aliases.get(key, key): value for key, value in partial.items()}


class ConfigStore:
    """Load, hold and save the ``AgentConfig``."""

    def __init__(self, path: Optional[str | pathlib.Path] = None) -> None:
        self.path = pathlib.Path(path or AGENT_CONFIG_PATH).expanduser()
        self._config = self._load()

    def get(self) -> AgentConfig:
        """Return a copy of the current configuration."""
        return self._config.model_copy()

    def save(self, partial: Mapping[str, Any]) -> AgentConfig:
        """Merge *partial* into the current config, persist it, return the result.

        Keys may be camelCase or snake_case.  An update that fails
        validation is logged and discarded.
        """
        merged = self._config.model_dump(by_alias=True)
        merged.update(_to_wire_keys(partial))
        try:
            self._config = AgentConfig.model_validate(merged)
        except ValueError as exc:
            logger.error("[config] rejected update: %s", exc)
            return self.get()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(self._config.model_dump(mode="json", by_alias=True), f, indent=2)
        except OSError as exc:
            logger.error("[config] save failed (%s): %s", self.path, exc)
        return self.get()

    def _load(self) -> AgentConfig:
        defaults = default_config()
        if not self.path.exists():
            return defaults
        try:
            with self.path.open("r", encoding="utf-8") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
            merged = defaults.model_dump(by_alias=True)
            merged.update(_to_wire_keys(stored))
            return AgentConfig.model_validate(merged)
        except (OSError, ValueError) as exc:
            logger.error("[config] load failed (%s): %s", self.path, exc)
            return defaults
