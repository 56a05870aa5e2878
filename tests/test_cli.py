"""Tests for the TradeSense CLI."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tradesense.cli.main import LAZY_SUBCOMMANDS, cli
from tradesense.db.store import DataStore

from conftest import make_stock


@pytest.fixture(autouse=True)
def isolated_config(temp_dir: Path, monkeypatch):
    """Keep the CLI away from the real home configuration."""
    monkeypatch.setattr("tradesense.config.DEFAULT_CONFIG_PATH", temp_dir / "none.toml")
    monkeypatch.delenv("TRADESENSE_USER", raising=False)
    monkeypatch.delenv("TRADESENSE_DB", raising=False)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    path = temp_dir / "cli.db"
    store = DataStore(path)
    store.save_stock(make_stock("TCS", 150.0))
    return path


def _run(db_path: Path, *args: str):
    return CliRunner().invoke(cli, ["--db", str(db_path), *args])


def test_all_lazy_commands_load():
    runner = CliRunner()
    for name in LAZY_SUBCOMMANDS:
        result = runner.invoke(cli, [name, "--help"])
        assert result.exit_code == 0, f"{name}: {result.output}"


def test_init_seeds_once(temp_dir: Path):
    path = temp_dir / "fresh.db"

    first = _run(path, "init")
    second = _run(path, "init")

    assert first.exit_code == 0
    assert "Added 8 sample stocks" in first.output
    assert "already initialized" in second.output


def test_buy_then_portfolio(db_path: Path):
    result = _run(db_path, "-u", "alice", "buy", "tcs", "10", "--price", "100")
    assert result.exit_code == 0, result.output
    assert "Trade Recorded" in result.output

    result = _run(db_path, "-u", "alice", "portfolio")
    assert result.exit_code == 0
    assert "TCS" in result.output

    position = DataStore(db_path).get_position("alice", "TCS")
    assert position.quantity == 10


def test_buy_at_market_price(db_path: Path):
    result = _run(db_path, "-u", "alice", "buy", "TCS", "2")

    assert result.exit_code == 0, result.output
    assert DataStore(db_path).get_position("alice", "TCS").avg_cost == 150.0


def test_trade_requires_user(db_path: Path):
    result = _run(db_path, "buy", "TCS", "1")

    assert result.exit_code == 1
    assert "Not authenticated" in result.output


def test_invalid_quantity(db_path: Path):
    result = _run(db_path, "-u", "alice", "buy", "TCS", "0", "--price", "10")

    assert result.exit_code == 1
    assert DataStore(db_path).get_trades("alice") == []


def test_watchlist_flow(db_path: Path):
    assert _run(db_path, "-u", "alice", "watch", "add", "TCS").exit_code == 0

    result = _run(db_path, "-u", "alice", "watch", "list")
    assert "TCS" in result.output

    result = _run(db_path, "-u", "alice", "watch", "remove", "TCS")
    assert "Removed TCS" in result.output


def test_predict_requires_api_key(db_path: Path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    result = _run(db_path, "predict", "TCS")

    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_predict_reports_agent_failure(db_path: Path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    with patch("tradesense.agents.base.Runner") as runner:
        runner.run_sync.side_effect = ConnectionError("network down")
        result = _run(db_path, "predict", "TCS")

    assert result.exit_code == 1
    assert "network down" in result.output
    assert DataStore(db_path).get_predictions("TCS") == []


def test_buy_rejects_oversized_quantity(db_path: Path):
    result = _run(db_path, "-u", "alice", "buy", "TCS", "99999999999999999999")

    assert result.exit_code == 1
    assert DataStore(db_path).get_trades("alice") == []


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_trades_limit_must_be_positive(db_path: Path, limit: str):
    result = _run(db_path, "-u", "alice", "trades", "--limit", limit)

    assert result.exit_code == 2
