"""Shared helpers for TradeSense CLI commands."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def get_config():
    """Lazily load configuration."""
    from tradesense.config import load_config

    return load_config()


def get_service(ctx: click.Context, oracle=None):
    """Build a TradingService for the current invocation."""
    from tradesense.db.store import DataStore
    from tradesense.service import TradingService

    obj = ctx.find_root().obj or {}
    config = get_config()
    db_path: Optional[Path] = obj.get("db_path") or config.db_path
    return TradingService(DataStore(db_path), oracle=oracle)


def get_user(ctx: click.Context) -> Optional[str]:
    """Acting user from --user or configuration."""
    obj = ctx.find_root().obj or {}
    if obj.get("user"):
        return obj["user"]
    config = get_config()
    return config.user


def error_panel(title: str, error: Exception) -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{title}:[/red]\n\n{str(error)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def format_money(value: float) -> str:
    return f"₹{value:,.2f}"


def pnl_color(value: float) -> str:
    return "green" if value >= 0 else "red"
