"""Watchlist commands for TradeSense CLI.

Handles adding, removing and listing watched symbols.
"""

import click
from rich.panel import Panel
from rich.table import Table

from tradesense.cli.common import console, error_panel, format_money, get_service, get_user, pnl_color
from tradesense.errors import TradeSenseError


@click.group()
def watch() -> None:
    """Manage your watchlist.

    \b
    Examples:
      tradesense -u alice watch add RELIANCE
      tradesense -u alice watch remove RELIANCE
      tradesense -u alice watch list
    """
    pass


@watch.command("add")
@click.argument("symbol")
@click.pass_context
def add_symbol(ctx: click.Context, symbol: str) -> None:
    """Add SYMBOL to the watchlist."""
    try:
        item = get_service(ctx).add_to_watchlist(get_user(ctx), symbol)
    except TradeSenseError as e:
        error_panel("Failed to add symbol", e)

    console.print(f"[green]✓ {item.symbol} is on your watchlist[/green]")


@watch.command("remove")
@click.argument("symbol")
@click.pass_context
def remove_symbol(ctx: click.Context, symbol: str) -> None:
    """Remove SYMBOL from the watchlist."""
    symbol = symbol.upper()
    try:
        removed = get_service(ctx).remove_from_watchlist(get_user(ctx), symbol)
    except TradeSenseError as e:
        error_panel("Failed to remove symbol", e)

    if removed:
        console.print(f"[green]✓ Removed {symbol} from watchlist[/green]")
    else:
        console.print(f"[yellow]{symbol} is not in your watchlist[/yellow]")


@watch.command("list")
@click.pass_context
def list_watchlist(ctx: click.Context) -> None:
    """Show watched stocks with their latest prices."""
    watched = get_service(ctx).get_watchlist(get_user(ctx))

    if not watched:
        console.print(Panel(
            "[dim]Watchlist is empty. Use 'tradesense watch add SYMBOL' to add one.[/dim]",
            title="[bold]Watchlist[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Watchlist", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")

    for i, stock in enumerate(watched, 1):
        color = pnl_color(stock.change)
        table.add_row(
            str(i),
            stock.symbol,
            format_money(stock.current_price),
            f"[{color}]{stock.change_percent:+.2f}%[/{color}]",
        )

    console.print(table)
