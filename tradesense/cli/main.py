"""Main CLI entry point for TradeSense.

This module provides the main click group and lazy loading
for command modules to keep startup fast.
"""

import importlib
import logging
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are imported only when one of their commands
    is actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    # Market
    "init": "tradesense.cli.market",
    "stocks": "tradesense.cli.market",
    "quote": "tradesense.cli.market",
    # Trading
    "buy": "tradesense.cli.trade",
    "sell": "tradesense.cli.trade",
    "trades": "tradesense.cli.trade",
    # Portfolio
    "portfolio": "tradesense.cli.portfolio",
    # Watchlist
    "watch": "tradesense.cli.watchlist",
    # AI predictions
    "predict": "tradesense.cli.predict",
    "predictions": "tradesense.cli.predict",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradesense")
@click.option("-u", "--user", default=None, help="Acting user id (overrides config).")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Database file (overrides config).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, user: Optional[str], db_path: Optional[Path], verbose: bool) -> None:
    """TradeSense - simulated stock trading with AI price predictions.

    Browse a sample market, simulate trades, track your portfolio and
    watchlist, and ask an AI model for price predictions.

    \b
    Quick Start:
      tradesense init                    # Seed the sample market
      tradesense stocks                  # View the market
      tradesense -u alice buy TCS 10     # Simulate a buy
      tradesense -u alice portfolio      # View P&L
      tradesense predict TCS --timeframe 1w
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )

    ctx.ensure_object(dict)
    ctx.obj["user"] = user
    ctx.obj["db_path"] = db_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
