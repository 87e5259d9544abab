"""Tests for config.py: env parsing helpers and the shipped defaults."""

from __future__ import annotations

import importlib
import logging
import os
from unittest.mock import patch

import pytest

import config
from config import _parse_float, _parse_int


class TestParseFloat:

    @pytest.mark.parametrize(
        "raw, expected",
        [("0.7", 0.7), ("1.5", 1.0), ("-0.5", 0.0), ("not_a_number", 0.5)],
    )
    def test_parse_and_clamp(self, raw, expected):
        with patch.dict(os.environ, {"__TEST_FLOAT__": raw}):
            assert _parse_float("__TEST_FLOAT__", "0.5", low=0.0, high=1.0) == expected

    def test_unset_uses_default(self):
        assert _parse_float("__TEST_FLOAT_UNSET__", "6", low=0.0, high=3600.0) == 6.0

    def test_invalid_logged(self, caplog):
        with patch.dict(os.environ, {"__TEST_FLOAT__": "fast"}), caplog.at_level(logging.ERROR):
            _parse_float("__TEST_FLOAT__", "0.3", low=0.0, high=2.0)
        assert "Invalid value for __TEST_FLOAT__" in caplog.text


class TestParseInt:

    @pytest.mark.parametrize("raw, expected", [("25", 25), ("0", 1), ("abc", 10), ("2.5", 10)])
    def test_parse_and_minimum(self, raw, expected):
        with patch.dict(os.environ, {"__TEST_INT__": raw}):
            assert _parse_int("__TEST_INT__", "10", minimum=1) == expected

    def test_clamp_logged(self, caplog):
        with patch.dict(os.environ, {"__TEST_INT__": "8"}), caplog.at_level(logging.WARNING):
            assert _parse_int("__TEST_INT__", "1024", minimum=64) == 64
        assert "below minimum" in caplog.text


class TestSettings:

    def test_env_overrides_on_reload(self):
        env = {
            "PUMP_STUDIO_BASE_URL": "http://localhost:9999",
            "AI_TEMPERATURE": "5",
            "MIN_TRAINING_DELAY_SECONDS": "2",
            "CORS_ORIGINS": "http://a.test, ,http://b.test",
        }
        try:
            with patch.dict(os.environ, env):
                reloaded = importlib.reload(config)
                assert reloaded.PUMP_STUDIO_BASE_URL == "http://localhost:9999"
                assert reloaded.AI_TEMPERATURE == 2.0
                assert reloaded.MIN_TRAINING_DELAY_SECONDS == 2.0
                assert reloaded.CORS_ORIGINS == ["http://a.test", "http://b.test"]
        finally:
            importlib.reload(config)

    def test_agent_config_path_under_home(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AGENT_CONFIG_PATH", None)
            try:
                reloaded = importlib.reload(config)
                assert reloaded.AGENT_CONFIG_PATH.endswith(os.path.join(".pump-studio", "trainer.json"))
            finally:
                importlib.reload(config)
