"""AI prediction commands for TradeSense CLI."""

import click
from rich.panel import Panel
from rich.table import Table

from tradesense.cli.common import console, error_panel, format_money, get_config, get_service, pnl_color
from tradesense.errors import TradeSenseError


@click.command()
@click.argument("symbol")
@click.option(
    "-t", "--timeframe",
    type=click.Choice(["1d", "1w", "1m"]),
    default="1d",
    show_default=True,
    help="Prediction horizon.",
)
@click.pass_context
def predict(ctx: click.Context, symbol: str, timeframe: str) -> None:
    """Ask the AI model for a price prediction on SYMBOL.

    Requires OPENAI_API_KEY to be set.

    \b
    Examples:
      tradesense predict TCS
      tradesense predict INFY --timeframe 1w
    """
    from tradesense.agents import AgentPredictionOracle, get_api_key

    if not get_api_key():
        console.print(Panel(
            "[red]OPENAI_API_KEY is not set.[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    config = get_config()
    oracle = AgentPredictionOracle(
        model=config.prediction.model,
        temperature=config.prediction.temperature,
    )
    service = get_service(ctx, oracle=oracle)

    try:
        with console.status(f"[bold cyan]Predicting {symbol.upper()} ({timeframe})...[/bold cyan]"):
            result = service.generate_prediction(symbol, timeframe)
        stock = service.get_stock(symbol)
    except TradeSenseError as e:
        error_panel("Prediction failed", e)
    except Exception as e:
        console.print(Panel(
            f"[red]Error during prediction: {e}[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    move = result.predicted_price - stock.current_price
    color = pnl_color(move)
    console.print(Panel(
        f"Current Price:   {format_money(stock.current_price)}\n"
        f"Predicted Price: [{color}]{format_money(result.predicted_price)}[/{color}]\n"
        f"Confidence:      {result.confidence:.0f}%\n\n"
        f"{result.reasoning}",
        title=f"[bold]{stock.symbol} · {timeframe}[/bold]",
        border_style="cyan",
    ))


@click.command()
@click.argument("symbol")
@click.pass_context
def predictions(ctx: click.Context, symbol: str) -> None:
    """Show the latest stored predictions for SYMBOL."""
    try:
        history = get_service(ctx).get_predictions(symbol)
    except TradeSenseError as e:
        error_panel("Failed to load predictions", e)

    if not history:
        console.print(f"[dim]No predictions for {symbol.upper()}[/dim]")
        return

    table = Table(title=f"Predictions: {symbol.upper()}", show_header=True, header_style="bold cyan")
    table.add_column("Created", style="dim")
    table.add_column("Timeframe")
    table.add_column("At", justify="right")
    table.add_column("Predicted", justify="right")
    table.add_column("Confidence", justify="right")

    for p in history:
        color = pnl_color(p.predicted_price - p.current_price)
        table.add_row(
            p.created_at.strftime("%Y-%m-%d %H:%M"),
            p.timeframe,
            format_money(p.current_price),
            f"[{color}]{format_money(p.predicted_price)}[/{color}]",
            f"{p.confidence:.0f}%",
        )

    console.print(table)
