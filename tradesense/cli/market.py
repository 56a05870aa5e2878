"""Market commands for TradeSense CLI.

Seeds the sample market and displays stock quotes.
"""

import click
from rich.panel import Panel
from rich.table import Table

from tradesense.cli.common import console, error_panel, format_money, get_service, pnl_color
from tradesense.errors import TradeSenseError


@click.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Seed the sample market.

    Does nothing if the market already has stocks.
    """
    try:
        added = get_service(ctx).initialize_stocks()
    except TradeSenseError as e:
        error_panel("Failed to initialize market", e)

    if added:
        console.print(f"[green]✓ Added {added} sample stocks[/green]")
    else:
        console.print("[yellow]Market already initialized[/yellow]")


@click.command()
@click.pass_context
def stocks(ctx: click.Context) -> None:
    """List all stocks in the market.

    \b
    Examples:
      tradesense stocks
    """
    market = get_service(ctx).get_stocks()

    if not market:
        console.print(Panel(
            "[dim]No stocks found. Run 'tradesense init' to seed the market.[/dim]",
            title="[bold]Market[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Market", show_header=True, header_style="bold cyan")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Sector", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Volume", justify="right")

    for stock in market:
        color = pnl_color(stock.change)
        table.add_row(
            stock.symbol,
            stock.name,
            stock.sector,
            format_money(stock.current_price),
            f"[{color}]{stock.change:+.2f} ({stock.change_percent:+.2f}%)[/{color}]",
            f"{stock.volume:,}",
        )

    console.print(table)


@click.command()
@click.argument("symbol")
@click.pass_context
def quote(ctx: click.Context, symbol: str) -> None:
    """Show the latest quote for SYMBOL.

    \b
    Examples:
      tradesense quote RELIANCE
    """
    try:
        stock = get_service(ctx).get_stock(symbol)
    except TradeSenseError as e:
        error_panel("Failed to get quote", e)

    if stock is None:
        console.print(f"[yellow]Stock not found: {symbol.upper()}[/yellow]")
        raise SystemExit(1)

    color = pnl_color(stock.change)
    console.print(Panel(
        f"[bold]{stock.name}[/bold] ({stock.sector})\n\n"
        f"Price:          {format_money(stock.current_price)}\n"
        f"Previous Close: {format_money(stock.previous_close)}\n"
        f"Change:         [{color}]{stock.change:+.2f} ({stock.change_percent:+.2f}%)[/{color}]\n"
        f"Volume:         {stock.volume:,}\n"
        f"Market Cap:     ₹{stock.market_cap:,.0f} Cr",
        title=f"[bold]{stock.symbol}[/bold]",
        border_style="cyan",
    ))
