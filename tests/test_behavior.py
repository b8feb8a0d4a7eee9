"""
Tests for behavior analysis: rule set, response parsing, and the model
strategy's fallback on error, timeout, malformed reply and spent deadline.
"""

from __future__ import annotations

import asyncio
import dataclasses
from unittest.mock import AsyncMock

import pytest

from backend_txrisk.analysis_engine.behavior import (
    BehaviorAnalyzer,
    ModelBehaviorStrategy,
    RuleBasedBehaviorStrategy,
    build_behavior_prompt,
    parse_behavior_response,
    rule_based_behavior_analysis,
)
from backend_txrisk.analysis_engine.features import extract_features
from backend_txrisk.core.deadline import Deadline
from backend_txrisk.core.exceptions import ExternalServiceError, ModelResponseParseError
from conftest import FakeTextService


@pytest.fixture
def features(everyday_tx, established, now_ms):
    return extract_features(everyday_tx, established, now_ms)


def test_rules_quiet_for_everyday_payment(features):
    result = rule_based_behavior_analysis(features)
    assert result.score == 0
    assert result.indicators == ()
    assert result.source == "rules"


def test_rules_each_contribution(features):
    assert rule_based_behavior_analysis(dataclasses.replace(features, amount_z_score=2.5)).indicators == (
        "Amount significantly higher than usual",
    )
    low = rule_based_behavior_analysis(dataclasses.replace(features, amount_z_score=-3.0))
    assert (low.score, low.indicators) == (20, ("Amount significantly lower than usual",))
    # 150 tx / 400 days * 5 = 1.875
    assert rule_based_behavior_analysis(dataclasses.replace(features, tx_count_last_24h=2)).score == 25
    assert rule_based_behavior_analysis(dataclasses.replace(features, tx_count_last_24h=1)).score == 0
    assert rule_based_behavior_analysis(dataclasses.replace(features, hour_of_day=23)).score == 10
    assert rule_based_behavior_analysis(dataclasses.replace(features, hour_of_day=5)).score == 10
    assert rule_based_behavior_analysis(dataclasses.replace(features, hour_of_day=22)).score == 0
    big_new = dataclasses.replace(features, is_new_recipient=True, amount=151.0)
    assert rule_based_behavior_analysis(big_new).score == 15
    assert rule_based_behavior_analysis(dataclasses.replace(big_new, amount=150.0)).score == 0


def test_rules_all_fire(features):
    f = dataclasses.replace(
        features, amount_z_score=4.0, tx_count_last_24h=10, hour_of_day=2, is_new_recipient=True, amount=500.0
    )
    assert rule_based_behavior_analysis(f).score == 20 + 25 + 10 + 15


def test_parse_response():
    result = parse_behavior_response("SCORE: 42 | INDICATORS: late night, new payee ")
    assert result.score == 42
    assert result.indicators == ("late night", "new payee")
    assert result.source == "model"
    assert parse_behavior_response("Analysis...\nSCORE: 250 | INDICATORS: none").score == 100
    assert parse_behavior_response("SCORE: 5 | INDICATORS: none").indicators == ()
    assert parse_behavior_response("SCORE: 5 | INDICATORS: [a, b]").indicators == ("a", "b")


@pytest.mark.parametrize(
    "text",
    ["", "The score is 40", "SCORE: high | INDICATORS: x", "INDICATORS: a", "score: 5 | indicators: a"],
)
def test_parse_response_rejects_deviations(text):
    with pytest.raises(ModelResponseParseError):
        parse_behavior_response(text)


def test_prompt_mentions_profile_and_format(features, established):
    prompt = build_behavior_prompt(features, established)
    assert "Account age: 400 days" in prompt
    assert "Total transactions: 150" in prompt
    assert "SCORE: [0-100] | INDICATORS:" in prompt


def test_model_strategy_uses_reply(features, established):
    service = FakeTextService("SCORE: 70 | INDICATORS: burst")
    analyzer = BehaviorAnalyzer.with_model(service, timeout=1.0)
    result = asyncio.run(analyzer.analyze(features, established))
    assert (result.score, result.indicators, result.source) == (70, ("burst",), "model")
    assert len(service.prompts) == 1


@pytest.mark.parametrize(
    "service",
    [
        FakeTextService(error=ExternalServiceError("ollama", "connection refused")),
        FakeTextService(error=ConnectionError("ollama refused")),
        FakeTextService("I think this looks fine."),
        FakeTextService("SCORE: 90 | INDICATORS: slow", delay=2.0),
    ],
    ids=["service-error", "connection-error", "unparseable", "timeout"],
)
def test_model_strategy_falls_back_to_rules(service, features, established):
    strategy = ModelBehaviorStrategy(service, timeout=0.05)
    hot = dataclasses.replace(features, hour_of_day=3)
    result = asyncio.run(strategy.analyze(hot, established))
    assert result == rule_based_behavior_analysis(hot)
    assert result.score == 10


def test_spent_deadline_skips_model_call(features, established):
    service = AsyncMock()
    deadline = Deadline.after(10)
    deadline.cancel()
    result = asyncio.run(ModelBehaviorStrategy(service, timeout=1.0).analyze(features, established, deadline))
    service.generate.assert_not_awaited()
    assert result.source == "rules"


def test_no_service_selects_rules():
    assert isinstance(BehaviorAnalyzer.with_model(None, 1.0).strategy, RuleBasedBehaviorStrategy)
    assert isinstance(BehaviorAnalyzer().strategy, RuleBasedBehaviorStrategy)


def test_service_timeout_matches_deadline_budget(features, established):
    """The timeout handed to the service is the same budget the call is bounded by."""
    service = AsyncMock()
    service.generate.return_value = "SCORE: 1 | INDICATORS: none"
    deadline = Deadline.after(0.5)
    asyncio.run(ModelBehaviorStrategy(service, timeout=5.0).analyze(features, established, deadline))
    prompt, timeout = service.generate.await_args.args
    assert "SCORE: [0-100]" in prompt
    assert 0 < timeout <= 0.5
