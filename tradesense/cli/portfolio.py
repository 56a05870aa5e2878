"""Portfolio commands for TradeSense CLI."""

import click
from rich.panel import Panel
from rich.table import Table

from tradesense.cli.common import console, format_money, get_service, get_user, pnl_color
from tradesense.valuation import summarize


@click.command()
@click.pass_context
def portfolio(ctx: click.Context) -> None:
    """Show holdings valued at current market prices.

    \b
    Examples:
      tradesense -u alice portfolio
    """
    entries = get_service(ctx).get_portfolio(get_user(ctx))

    if not entries:
        console.print(Panel(
            "[dim]No holdings. Use 'tradesense buy SYMBOL QTY' to simulate a trade.[/dim]",
            title="[bold]Portfolio[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Portfolio", show_header=True, header_style="bold cyan")
    table.add_column("Symbol", style="bold")
    table.add_column("Qty", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Invested", justify="right")
    table.add_column("LTP", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("P&L", justify="right")

    for entry in entries:
        color = pnl_color(entry.pnl)
        table.add_row(
            entry.symbol,
            str(entry.position.quantity),
            format_money(entry.position.avg_cost),
            format_money(entry.position.total_invested),
            format_money(entry.stock.current_price),
            format_money(entry.current_value),
            f"[{color}]{format_money(entry.pnl)} ({entry.pnl_percent:+.2f}%)[/{color}]",
        )

    console.print(table)

    summary = summarize(entries)
    color = pnl_color(summary.pnl)
    console.print(Panel(
        f"Invested:      {format_money(summary.total_invested)}\n"
        f"Current Value: {format_money(summary.current_value)}\n"
        f"P&L:           [{color}]{format_money(summary.pnl)} ({summary.pnl_percent:+.2f}%)[/{color}]",
        title="[bold]Summary[/bold]",
        border_style=color,
    ))
