"""AI agents for TradeSense.

- AgentPredictionOracle: LLM-backed stock price predictions
"""

from tradesense.agents.base import create_agent, get_api_key, get_model, run_agent_sync
from tradesense.agents.predictor import (
    AgentPredictionOracle,
    PredictionOracle,
    build_prompt,
    parse_prediction,
)

__all__ = [
    # Base utilities
    "create_agent",
    "run_agent_sync",
    "get_model",
    "get_api_key",
    # Prediction
    "AgentPredictionOracle",
    "PredictionOracle",
    "build_prompt",
    "parse_prediction",
]
