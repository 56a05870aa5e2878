"""Base utilities for AI agents.

This module provides common utilities for creating and running AI agents
using the OpenAI Agents SDK.
"""

import logging
import os
from typing import Any, Optional

# Disable tracing to avoid noisy 503 errors from telemetry
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, ModelSettings, Runner

from tradesense.config import DEFAULT_PREDICTION_MODEL

logger = logging.getLogger(__name__)


def get_model() -> str:
    """Get the model to use for agents.

    Checks OPENAI_MODEL environment variable, falls back to default.

    Returns:
        Model name string.
    """
    return os.environ.get("OPENAI_MODEL", DEFAULT_PREDICTION_MODEL)


def get_api_key() -> Optional[str]:
    """Get the OpenAI API key.

    Returns:
        API key string or None if not configured.
    """
    return os.environ.get("OPENAI_API_KEY")


def create_agent(
    name: str,
    instructions: str,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
) -> Agent:
    """Create an AI agent with the specified configuration.

    Args:
        name: Name of the agent.
        instructions: System instructions for the agent.
        model: Optional model override. Uses default if not specified.
        temperature: Optional sampling temperature.

    Returns:
        Configured Agent instance.
    """
    return Agent(
        name=name,
        instructions=instructions,
        model=model or get_model(),
        model_settings=ModelSettings(temperature=temperature),
    )


def run_agent_sync(
    agent: Agent,
    message: str,
    context: Optional[dict[str, Any]] = None,
) -> Optional[str]:
    """Run an agent synchronously and return the response.

    Args:
        agent: The agent to run.
        message: User message to send to the agent.
        context: Optional context dictionary to pass to the agent.

    Returns:
        Agent's response as a string, or None if it produced nothing.
    """
    logger.info("Running agent %s with model %s", agent.name, agent.model)
    result = Runner.run_sync(agent, message, context=context)
    return result.final_output
