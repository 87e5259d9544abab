"""Tests for provider response reconciliation (reconciler.py)."""

from __future__ import annotations

import json
import logging
import random
import string

import pytest

from pump_trainer.heuristics import compute_defaults
from pump_trainer.reconciler import (
    parse_orchestrator_response,
    strip_code_fences,
    validate_number,
    validate_risk_factors,
    validate_summary,
)


class TestStripCodeFences:

    def test_plain_text_untouched(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_inner_backticks_kept_when_not_fenced(self):
        assert strip_code_fences('{"a": "```"}') == '{"a": "```"}'


class TestWholeResultFallback:

    def test_not_json_returns_defaults(self, risky_dp):
        assert parse_orchestrator_response("not json", risky_dp) == compute_defaults(risky_dp)

    @pytest.mark.parametrize("raw", ["", "   ", "[1, 2, 3]", "42", '"text"', "null", "{broken"])
    def test_non_object_returns_defaults(self, raw, risky_dp):
        assert parse_orchestrator_response(raw, risky_dp) == compute_defaults(risky_dp)

    def test_parse_failure_logged(self, risky_dp, caplog):
        with caplog.at_level(logging.WARNING, logger="pump_trainer.reconciler"):
            parse_orchestrator_response("Sure! Here is my analysis.", risky_dp)
        assert "JSON parse failed" in caplog.text


class TestPerFieldReconciliation:

    def test_score_clamped_and_rest_from_heuristics(self, risky_dp):
        result = parse_orchestrator_response('{"score": 150, "sentiment": "bullish"}', risky_dp)
        defaults = compute_defaults(risky_dp)
        assert result.score == 100
        assert result.sentiment == "bullish"
        assert result.model_dump(exclude={"score", "sentiment"}) == defaults.model_dump(
            exclude={"score", "sentiment"}
        )

    def test_valid_response_passes_through(self, risky_dp, valid_ai_response):
        result = parse_orchestrator_response(json.dumps(valid_ai_response), risky_dp)
        assert result.model_dump(by_alias=True) == valid_ai_response

    def test_fenced_valid_response(self, risky_dp, valid_ai_response):
        raw = "```json\n" + json.dumps(valid_ai_response, indent=2) + "\n```"
        assert parse_orchestrator_response(raw, risky_dp).trend_direction == "reversal"

    def test_out_of_domain_enums_replaced(self, risky_dp, valid_ai_response):
        bad = dict(valid_ai_response, sentiment="very bullish", riskLevel="HIGH", volumeProfile=3)
        result = parse_orchestrator_response(json.dumps(bad), risky_dp)
        defaults = compute_defaults(risky_dp)
        assert result.sentiment == defaults.sentiment
        assert result.risk_level == defaults.risk_level
        assert result.volume_profile == defaults.volume_profile
        assert result.score == 22

    def test_numbers_rounded_and_clamped(self, risky_dp):
        result = parse_orchestrator_response(
            '{"score": 49.5, "buyPressure": -20, "volatilityScore": 1e9}', risky_dp
        )
        assert result.score == 50
        assert result.buy_pressure == 0
        assert result.volatility_score == 100

    def test_numeric_strings_rejected(self, risky_dp):
        result = parse_orchestrator_response('{"score": "90"}', risky_dp)
        assert result.score == compute_defaults(risky_dp).score

    def test_bool_score_rejected(self, risky_dp):
        result = parse_orchestrator_response('{"score": true}', risky_dp)
        assert result.score == compute_defaults(risky_dp).score

    def test_nan_score_rejected(self, risky_dp):
        # Python's json accepts the NaN literal
        result = parse_orchestrator_response('{"score": NaN, "buyPressure": Infinity}', risky_dp)
        assert result.score == compute_defaults(risky_dp).score
        assert result.buy_pressure == 100

    def test_blank_summary_replaced(self, risky_dp):
        result = parse_orchestrator_response('{"summary": "   "}', risky_dp)
        assert result.summary == compute_defaults(risky_dp).summary

    def test_risk_factors_truncated_to_eight(self, risky_dp):
        tags = [
            "whale_dominance", "high_concentration", "low_liquidity", "declining_holders",
            "bonding_curve_risk", "dead_volume", "rug_pull_risk", "pump_and_dump",
            "wash_trading", "dev_selling",
        ]
        result = parse_orchestrator_response(json.dumps({"riskFactors": tags}), risky_dp)
        assert result.risk_factors == tags[:8]

    def test_unknown_risk_factor_rejects_list(self, risky_dp):
        raw = json.dumps({"riskFactors": ["whale_dominance", "moon_soon"]})
        result = parse_orchestrator_response(raw, risky_dp)
        assert result.risk_factors == compute_defaults(risky_dp).risk_factors

    def test_unknown_tag_past_eighth_is_dropped(self, risky_dp):
        tags = ["whale_dominance"] * 8 + ["made_up"]
        result = parse_orchestrator_response(json.dumps({"riskFactors": tags}), risky_dp)
        assert result.risk_factors == ["whale_dominance"] * 8

    def test_empty_risk_factors_rejected(self, risky_dp):
        result = parse_orchestrator_response('{"riskFactors": []}', risky_dp)
        assert result.risk_factors == compute_defaults(risky_dp).risk_factors


class TestValidators:

    @pytest.mark.parametrize(
        "value, expected",
        [(0, 0), (100, 100), (100.4, 100), (2.5, 3), (-0.4, 0), (None, None), ("5", None), (False, None)],
    )
    def test_validate_number(self, value, expected):
        assert validate_number(value) == expected

    def test_validate_summary(self):
        assert validate_summary("ok") == "ok"
        assert validate_summary("") is None
        assert validate_summary(12) is None

    def test_validate_risk_factors_non_list(self):
        assert validate_risk_factors("whale_dominance") is None
        assert validate_risk_factors([1, 2]) is None


class TestFuzz:
    """Arbitrary provider text never raises and always yields a valid result."""

    @staticmethod
    def _random_value(rng: random.Random, depth: int = 0):
        kind = rng.randrange(7 if depth < 2 else 5)
        if kind == 0:
            return rng.uniform(-1e6, 1e6)
        if kind == 1:
            return rng.randint(-1000, 1000)
        if kind == 2:
            return "".join(rng.choices(string.printable, k=rng.randint(0, 20)))
        if kind == 3:
            return rng.choice([None, True, False])
        if kind == 4:
            return rng.choice(["bullish", "critical", "dry", "up", "dead", "whale_dominance"])
        if kind == 5:
            return [TestFuzz._random_value(rng, depth + 1) for _ in range(rng.randint(0, 10))]
        return {"k": TestFuzz._random_value(rng, depth + 1)}

    def test_random_objects(self, risky_dp, valid_ai_response):
        rng = random.Random(1234)
        keys = list(valid_ai_response)
        for _ in range(300):
            obj = {key: self._random_value(rng) for key in rng.sample(keys, rng.randint(0, len(keys)))}
            result = parse_orchestrator_response(json.dumps(obj), risky_dp)
            assert 0 <= result.score <= 100
            assert 1 <= len(result.risk_factors) <= 8

    def test_random_text(self, risky_dp):
        rng = random.Random(99)
        for _ in range(200):
            raw = "".join(rng.choices(string.printable, k=rng.randint(0, 80)))
            result = parse_orchestrator_response(raw, risky_dp)
            assert result.summary.strip()
            assert result.sentiment in ("bullish", "bearish", "neutral")

    def test_deeply_nested_json(self, risky_dp):
        raw = "[" * 100_000 + "]" * 100_000
        assert parse_orchestrator_response(raw, risky_dp) == compute_defaults(risky_dp)
