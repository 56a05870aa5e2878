"""Configuration for TradeSense.

Settings come from ``~/.config/tradesense/config.toml`` with environment
variables taking precedence:

    TRADESENSE_DB    database path
    TRADESENSE_USER  acting user id
    OPENAI_MODEL     model used for predictions
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

CONFIG_DIR = Path.home() / ".config" / "tradesense"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "tradesense.db"

# Model used by the original prediction action
DEFAULT_PREDICTION_MODEL = "gpt-4.1-nano"


class PredictionConfig(BaseModel):
    """Prediction oracle settings."""

    model: str = Field(default=DEFAULT_PREDICTION_MODEL, description="LLM model name")
    temperature: float = Field(default=0.7, ge=0, le=2, description="Sampling temperature")


class AppConfig(BaseModel):
    """Top-level application settings."""

    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database path")
    user: Optional[str] = Field(default=None, description="Acting user id")
    prediction: PredictionConfig = Field(default_factory=PredictionConfig)


def _load_toml(config_path: Path) -> dict:
    """Load the TOML file, returning an empty dict if missing or unreadable."""
    import toml

    if not config_path.exists():
        return {}

    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError):
        return {}


def _section(raw: dict, name: str) -> dict:
    """A config table by name, or an empty dict if absent or not a table."""
    section = raw.get(name)
    return section if isinstance(section, dict) else {}


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Optional config file path. Defaults to
            ``~/.config/tradesense/config.toml``.

    Returns:
        Resolved AppConfig.
    """
    raw = _load_toml(config_path or DEFAULT_CONFIG_PATH)

    data: dict = {}
    db_path = os.environ.get("TRADESENSE_DB") or _section(raw, "database").get("path")
    if db_path:
        data["db_path"] = Path(db_path).expanduser()

    user = os.environ.get("TRADESENSE_USER") or _section(raw, "user").get("id")
    if user:
        data["user"] = user

    prediction = dict(_section(raw, "prediction"))
    if os.environ.get("OPENAI_MODEL"):
        prediction["model"] = os.environ["OPENAI_MODEL"]
    data["prediction"] = PredictionConfig(**prediction)

    return AppConfig(**data)
