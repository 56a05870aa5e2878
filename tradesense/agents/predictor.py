"""Prediction oracle.

Asks an LLM for a price prediction and parses its JSON answer into a
PredictionResult. The call is made once; any failure surfaces to the
caller as PredictionUnavailable.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Callable, Optional

import pydantic

from tradesense.agents.base import create_agent, run_agent_sync
from tradesense.errors import PredictionUnavailable
from tradesense.models import PredictionResult, StockFacts, Timeframe


PREDICTION_INSTRUCTIONS = """You are an equity analyst covering Indian stocks listed on NSE.
Answer only with the JSON object requested, without any surrounding prose.
"""

PROMPT_TEMPLATE = """Analyze {name} ({symbol}) stock:
Current Price: ₹{current_price}
Previous Close: ₹{previous_close}
Change: {change} ({change_percent}%)
Sector: {sector}
Market Cap: ₹{market_cap} Cr

Predict the stock price for {timeframe} timeframe and provide:
1. Predicted price
2. Confidence level (0-100)
3. Brief reasoning (max 100 words)

Format your response as JSON:
{{
  "predictedPrice": number,
  "confidence": number,
  "reasoning": "string"
}}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_prompt(facts: StockFacts, timeframe: Timeframe) -> str:
    """Render the prediction prompt for a stock."""
    return PROMPT_TEMPLATE.format(timeframe=timeframe, **facts.model_dump())


def parse_prediction(content: Optional[str]) -> PredictionResult:
    """Parse the model's answer into a PredictionResult.

    A surrounding markdown code fence is tolerated.

    Args:
        content: Raw model output.

    Returns:
        Parsed PredictionResult.

    Raises:
        PredictionUnavailable: If content is empty or not the expected JSON.
    """
    if content is None or not str(content).strip():
        raise PredictionUnavailable("No prediction generated")

    text = str(content).strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)

    try:
        data = json.loads(text)
        return PredictionResult.model_validate(data)
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        raise PredictionUnavailable("Failed to parse AI prediction") from e


class PredictionOracle(ABC):
    """Produces a price prediction from stock facts."""

    @abstractmethod
    def predict(self, facts: StockFacts, timeframe: Timeframe) -> PredictionResult:
        """Predict the price of a stock over a timeframe.

        Raises:
            PredictionUnavailable: If no usable prediction was produced.
        """


class AgentPredictionOracle(PredictionOracle):
    """Prediction oracle backed by a single OpenAI Agents SDK call."""

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: float = 0.7,
        runner: Callable[..., Optional[str]] = run_agent_sync,
    ):
        """Initialize the oracle.

        Args:
            model: Optional model override.
            temperature: Sampling temperature.
            runner: Function that runs an agent and returns its text output.
        """
        self.agent = create_agent(
            name="PredictionAgent",
            instructions=PREDICTION_INSTRUCTIONS,
            model=model,
            temperature=temperature,
        )
        self._runner = runner

    def predict(self, facts: StockFacts, timeframe: Timeframe) -> PredictionResult:
        content = self._runner(self.agent, build_prompt(facts, timeframe))
        return parse_prediction(content)
