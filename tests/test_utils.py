"""Unit tests for pump_trainer.utils: rounding and display formatting."""

from __future__ import annotations

import pytest

from pump_trainer.utils import (
    clamp,
    format_compact,
    format_pct,
    format_thousands,
    format_usd,
    mask_secret,
    round_half_up,
    truncate,
)


class TestRoundHalfUp:

    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (66.666, 67), (49.4999, 49), (-0.5, 0), (-1.5, -1), (100.0, 100)],
    )
    def test_ties_go_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_differs_from_builtin_round(self):
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3


class TestClamp:

    def test_bounds(self):
        assert clamp(150, 0, 100) == 100
        assert clamp(-3, 0, 100) == 0
        assert clamp(42.5, 0, 100) == 42.5

    def test_infinity(self):
        assert clamp(float("inf"), 0, 100) == 100


class TestFormatting:

    @pytest.mark.parametrize(
        "value, expected",
        [(2_500_000, "2.5M"), (1_000_000, "1.0M"), (12_345, "12.3K"), (999.994, "999.99"), (0, "0.00")],
    )
    def test_format_compact(self, value, expected):
        assert format_compact(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (3_400_000, "$3.4M"),
            (45_000, "$45.0K"),
            (12.5, "$12.50"),
            (0.25, "$0.2500"),
            (0.0000123, "$0.000012"),
        ],
    )
    def test_format_usd(self, value, expected):
        assert format_usd(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [(1234567, "1,234,567"), (1234567.0, "1,234,567"), (1234.5, "1,234.5"), (0.125, "0.125"), (15, "15")],
    )
    def test_format_thousands(self, value, expected):
        assert format_thousands(value) == expected

    @pytest.mark.parametrize("value, expected", [(12.34, "+12.3%"), (-4.0, "-4.0%"), (0, "0.0%")])
    def test_format_pct(self, value, expected):
        assert format_pct(value) == expected


class TestText:

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("abcdefghij", 5) == "abcd…"
        assert len(truncate("x" * 500, 280)) == 280

    @pytest.mark.parametrize(
        "value, expected",
        [("", ""), ("abc", "****"), ("sk-ant-api03-XYZW", "****XYZW")],
    )
    def test_mask_secret(self, value, expected):
        assert mask_secret(value) == expected
