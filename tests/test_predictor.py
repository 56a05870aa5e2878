"""Tests for the prediction oracle.

**Feature: prediction-oracle**
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradesense.agents.predictor import (
    AgentPredictionOracle,
    build_prompt,
    parse_prediction,
)
from tradesense.errors import PredictionUnavailable

from conftest import make_stock


class TestParsePrediction:
    """
    **Feature: prediction-oracle, Property 1: JSON Contract**

    The oracle answer must be a JSON object with predictedPrice,
    confidence (0-100) and reasoning; anything else is unavailable.
    """

    @given(
        price=st.floats(min_value=0.01, max_value=1e6, allow_nan=False, allow_infinity=False),
        confidence=st.floats(min_value=0, max_value=100, allow_nan=False),
        reasoning=st.text(max_size=200),
    )
    @settings(max_examples=50)
    def test_valid_json(self, price: float, confidence: float, reasoning: str):
        content = json.dumps({
            "predictedPrice": price,
            "confidence": confidence,
            "reasoning": reasoning,
        })

        result = parse_prediction(content)

        assert result.predicted_price == price
        assert result.confidence == confidence
        assert result.reasoning == reasoning

    def test_code_fence_is_tolerated(self):
        content = '```json\n{"predictedPrice": 101.5, "confidence": 60, "reasoning": "ok"}\n```'

        assert parse_prediction(content).predicted_price == 101.5

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_no_content(self, content):
        with pytest.raises(PredictionUnavailable, match="No prediction generated"):
            parse_prediction(content)

    @pytest.mark.parametrize(
        "content",
        [
            "The price will go up.",
            "[1, 2, 3]",
            '{"predictedPrice": 10}',
            '{"predictedPrice": "high", "confidence": 50, "reasoning": "x"}',
            '{"predictedPrice": 10, "confidence": 150, "reasoning": "x"}',
            '{"predictedPrice": NaN, "confidence": 50, "reasoning": "x"}',
            '{"predictedPrice": Infinity, "confidence": 50, "reasoning": "x"}',
            '{"predictedPrice": -5, "confidence": 50, "reasoning": "x"}',
            '{"predictedPrice": 0, "confidence": 50, "reasoning": "x"}',
        ],
    )
    def test_unparseable(self, content):
        with pytest.raises(PredictionUnavailable, match="Failed to parse AI prediction"):
            parse_prediction(content)


class TestBuildPrompt:
    """The prompt carries the stock facts and timeframe."""

    def test_prompt_contents(self):
        stock = make_stock("TCS", 3500.0, name="Tata Consultancy Services", sector="IT")

        prompt = build_prompt(stock.facts(), "1w")

        assert "Tata Consultancy Services (TCS)" in prompt
        assert "Current Price: ₹3500.0" in prompt
        assert "Sector: IT" in prompt
        assert "for 1w timeframe" in prompt
        assert '"predictedPrice": number' in prompt


class TestAgentPredictionOracle:
    """The oracle makes exactly one agent call and parses its output."""

    def test_predict(self):
        runner = MagicMock(return_value='{"predictedPrice": 3600, "confidence": 72, "reasoning": "Strong IT demand"}')
        oracle = AgentPredictionOracle(model="gpt-4.1-nano", runner=runner)

        result = oracle.predict(make_stock("TCS", 3500.0).facts(), "1d")

        assert result.predicted_price == 3600
        assert result.confidence == 72
        runner.assert_called_once()
        agent, prompt = runner.call_args.args
        assert agent is oracle.agent
        assert "TCS" in prompt

    def test_agent_configuration(self):
        oracle = AgentPredictionOracle(model="gpt-4.1-nano", temperature=0.7, runner=MagicMock())

        assert oracle.agent.model == "gpt-4.1-nano"
        assert oracle.agent.model_settings.temperature == 0.7

    def test_empty_output_is_unavailable(self):
        oracle = AgentPredictionOracle(runner=MagicMock(return_value=None))

        with pytest.raises(PredictionUnavailable):
            oracle.predict(make_stock().facts(), "1m")

    def test_default_runner_uses_agents_sdk(self):
        with patch("tradesense.agents.base.Runner") as mock_runner:
            mock_runner.run_sync.return_value = MagicMock(
                final_output='{"predictedPrice": 99, "confidence": 40, "reasoning": "flat"}'
            )
            oracle = AgentPredictionOracle()

            result = oracle.predict(make_stock().facts(), "1d")

        assert result.predicted_price == 99
        mock_runner.run_sync.assert_called_once()
