"""Trading commands for TradeSense CLI.

Simulates buy and sell trades and shows trade history.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradesense.cli.common import console, error_panel, format_money, get_service, get_user
from tradesense.errors import TradeSenseError


def _execute(ctx: click.Context, side: str, symbol: str, qty: int, price: Optional[float]) -> None:
    """Run a simulated trade and print the outcome."""
    service = get_service(ctx)
    symbol = symbol.upper()

    try:
        if price is None:
            stock = service.get_stock(symbol)
            if stock is None:
                console.print(f"[yellow]Stock not found: {symbol}. Pass --price to trade anyway.[/yellow]")
                raise SystemExit(1)
            price = stock.current_price

        update = service.simulate_trade(get_user(ctx), symbol, side, qty, price)
    except TradeSenseError as e:
        error_panel(f"{side.title()} failed", e)

    side_color = "green" if side == "BUY" else "red"
    lines = [
        "[bold]Trade Recorded[/bold]\n",
        f"Symbol:   {symbol}",
        f"Side:     [{side_color}]{side}[/{side_color}]",
        f"Quantity: {qty}",
        f"Price:    {format_money(price)}",
        f"Total:    {format_money(update.trade.total)}",
    ]
    if update.position is not None:
        lines.append(
            f"\nHolding:  {update.position.quantity} @ {format_money(update.position.avg_cost)}"
        )
    elif update.action == "delete":
        lines.append("\nPosition closed")
    else:
        lines.append("\n[dim]No position held; only the trade was recorded[/dim]")

    console.print(Panel("\n".join(lines), border_style=side_color))


@click.command()
@click.argument("symbol")
@click.argument("qty", type=int)
@click.option(
    "-p", "--price",
    type=float,
    default=None,
    help="Trade price. Defaults to the current market price.",
)
@click.pass_context
def buy(ctx: click.Context, symbol: str, qty: int, price: Optional[float]) -> None:
    """Simulate buying QTY shares of SYMBOL.

    \b
    Examples:
      tradesense -u alice buy RELIANCE 10
      tradesense -u alice buy INFY 5 --price 1500
    """
    _execute(ctx, "BUY", symbol, qty, price)


@click.command()
@click.argument("symbol")
@click.argument("qty", type=int)
@click.option(
    "-p", "--price",
    type=float,
    default=None,
    help="Trade price. Defaults to the current market price.",
)
@click.pass_context
def sell(ctx: click.Context, symbol: str, qty: int, price: Optional[float]) -> None:
    """Simulate selling QTY shares of SYMBOL.

    Selling more than you hold closes the position.

    \b
    Examples:
      tradesense -u alice sell RELIANCE 5
    """
    _execute(ctx, "SELL", symbol, qty, price)


@click.command()
@click.option("-n", "--limit", type=click.IntRange(min=1), default=50, show_default=True, help="Number of trades.")
@click.pass_context
def trades(ctx: click.Context, limit: int) -> None:
    """Show recent trades, newest first."""
    history = get_service(ctx).get_trades(get_user(ctx), limit=limit)

    if not history:
        console.print("[dim]No trades found[/dim]")
        return

    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Symbol", style="bold")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right")

    for trade in history:
        side_color = "green" if trade.side.value == "BUY" else "red"
        table.add_row(
            trade.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            trade.symbol,
            f"[{side_color}]{trade.side.value}[/{side_color}]",
            str(trade.quantity),
            format_money(trade.price),
            format_money(trade.total),
        )

    console.print(table)
