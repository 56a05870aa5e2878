"""CLI commands for TradeSense.

This package provides the command-line interface for TradeSense,
including market, trading, portfolio, watchlist and prediction commands.
"""

from tradesense.cli.main import cli, main

__all__ = ["cli", "main"]
