"""Scan and inspect commands for CoinScout CLI.

Both commands read a JSON file holding a list of
``{"snapshot": {...}, "candles": [[ts, o, h, l, c, vol], ...]}`` entries.
"""

import json
import random
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from coinscout.cli.formatting import format_change, format_price, format_volume, score_style
from coinscout.config import ConfigurationError, ScannerConfig, load_config
from coinscout.models.record import AnalysisRecord
from coinscout.pipeline import RankingPipeline, summarize

console = Console()


def _error(message: str) -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def _get_config(ctx: click.Context) -> ScannerConfig:
    """Load configuration from the --config path or the default location."""
    path = (ctx.obj or {}).get("config_path")
    try:
        return load_config(path)
    except ConfigurationError as e:
        _error(str(e))


def _load_assets(path: Path) -> list:
    """Read the asset list from a JSON file."""
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        _error(f"Could not read {path}: {e}")

    if not isinstance(data, list):
        _error(f"Expected a JSON list of assets in {path}")
    return data


def _asset_symbol(asset) -> str:
    snapshot = asset.get("snapshot", asset) if isinstance(asset, dict) else {}
    return str((snapshot or {}).get("symbol", "")).upper()


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-m", "--min-score",
    type=float,
    help="Minimum score to keep an asset (default from config: 50)",
)
@click.option(
    "-n", "--max-results",
    type=int,
    help="Maximum number of ranked assets (default from config: 100)",
)
@click.option(
    "--simulated",
    is_flag=True,
    help="Use random pseudo-indicators for assets without candles",
)
@click.option(
    "--seed",
    type=int,
    help="Seed for the simulated indicator source",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print ranked records as JSON",
)
@click.pass_context
def scan(
    ctx: click.Context,
    file: Path,
    min_score: Optional[float],
    max_results: Optional[int],
    simulated: bool,
    seed: Optional[int],
    as_json: bool,
) -> None:
    """Rank the assets in FILE by opportunity score.

    \b
    Examples:
      coinscout scan market.json
      coinscout scan market.json --min-score 65 --max-results 10
      coinscout scan market.json --simulated --seed 7
      coinscout scan market.json --json
    """
    config = _get_config(ctx)
    if simulated:
        config = config.model_copy(update={"simulated_mode": True})

    assets = _load_assets(file)
    rng = random.Random(seed) if seed is not None else None

    try:
        pipeline = RankingPipeline(config, rng=rng)
        records = pipeline.rank(assets, min_score=min_score, max_results=max_results)
    except ConfigurationError as e:
        _error(str(e))

    if as_json:
        click.echo(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        return

    if not records:
        console.print(Panel(
            "[dim]No assets reached the minimum score.[/dim]\n\n"
            "Try a lower [cyan]--min-score[/cyan] or add candle history to the file.",
            title="[bold]No Results[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title=f"Top Opportunities ({len(records)} of {len(assets)})",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Symbol", style="bold", no_wrap=True)
    table.add_column("Price", justify="right")
    table.add_column("24h", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("Conf.", justify="right")
    table.add_column("Strategy", style="dim")

    for rank, record in enumerate(records, start=1):
        style = score_style(record.score)
        symbol = f"{record.symbol} [yellow](sim)[/yellow]" if record.simulated else record.symbol
        table.add_row(
            str(rank),
            symbol,
            f"${format_price(record.price)}",
            format_change(record.change24h),
            f"${format_volume(record.volume24h)}",
            f"[{style}]{record.score:.0f}[/{style}]",
            f"{record.indicators.rsi:.1f}",
            f"{record.confidence:.0f}%",
            record.plan.strategy,
        )

    console.print(table)

    stats = summarize(records)
    console.print(
        f"[dim]Average score {stats.average_score:.1f} | "
        f"top {stats.top_symbol} | "
        f"strong {stats.strong} | good {stats.good}[/dim]"
    )


def _levels_table(record: AnalysisRecord) -> Table:
    levels = record.levels
    table = Table(title="Levels", show_header=True, header_style="bold cyan")
    table.add_column("Level")
    table.add_column("Price", justify="right")

    for name, value in (
        ("Resistance 3", levels.resistance3),
        ("Resistance 2", levels.resistance2),
        ("Resistance 1", levels.resistance1),
        ("Pivot", levels.pivot),
        ("Support 1", levels.support1),
        ("Support 2", levels.support2),
        ("Support 3", levels.support3),
    ):
        color = "red" if name.startswith("Resistance") else "green" if name.startswith("Support") else "yellow"
        table.add_row(f"[{color}]{name}[/{color}]", f"${format_price(value)}")

    fib = levels.fibonacci
    table.add_row("[dim]Fib 38.2%[/dim]", f"${format_price(fib.level382)}")
    table.add_row("[dim]Fib 61.8%[/dim]", f"${format_price(fib.level618)}")
    table.add_row("[dim]Ext 161.8%[/dim]", f"${format_price(fib.extension1618)}")
    return table


def _plan_lines(record: AnalysisRecord) -> list[str]:
    plan = record.plan
    targets = record.targets
    ratio_color = "green" if plan.meets_target else "yellow"

    return [
        f"[bold]Entry:[/bold] ${format_price(plan.entry_point)}",
        f"[bold]Stop loss:[/bold] [red]${format_price(plan.stop_loss)}[/red] ({plan.stop_loss_tier})",
        "[bold]Take profit:[/bold] " + " / ".join(
            f"${format_price(tp)}"
            for tp in (plan.take_profit.tp1, plan.take_profit.tp2, plan.take_profit.tp3, plan.take_profit.tp4)
        ),
        f"[bold]Risk/reward:[/bold] [{ratio_color}]{plan.risk_reward_ratio:.2f}[/{ratio_color}] - {plan.strategy}",
        f"[bold]Risk:[/bold] {plan.risk_level} (volatility {plan.volatility:.1f}) - {plan.position_size_advice}",
        "",
        f"[bold]Targets:[/bold] immediate ${format_price(targets.immediate)}, "
        f"${format_price(targets.target1)}, ${format_price(targets.target2)}, "
        f"${format_price(targets.target3)}, long term ${format_price(targets.long_term)}",
    ]


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("symbol")
@click.pass_context
def inspect(ctx: click.Context, file: Path, symbol: str) -> None:
    """Show levels, targets and the trade plan for SYMBOL in FILE.

    \b
    Examples:
      coinscout inspect market.json BTC-USDT
    """
    config = _get_config(ctx)
    symbol = symbol.upper()

    assets = _load_assets(file)
    asset = next((a for a in assets if _asset_symbol(a) == symbol), None)
    if asset is None:
        _error(f"{symbol} not found in {file}")

    try:
        pipeline = RankingPipeline(config)
    except ConfigurationError as e:
        _error(str(e))

    if isinstance(asset, dict) and "snapshot" in asset:
        record = pipeline.evaluate(asset["snapshot"], asset.get("candles"))
    else:
        record = pipeline.evaluate(asset)

    if record.error:
        _error(f"{symbol}: {record.error}")

    style = score_style(record.score)
    overview = [
        f"[bold]{record.symbol}[/bold] - ${format_price(record.price)} {format_change(record.change24h)}",
        f"[bold]Score:[/bold] [{style}]{record.score:.0f}[/{style}]   "
        f"[bold]Confidence:[/bold] {record.confidence:.0f}%",
        "",
        record.analysis,
    ]
    if record.signals:
        overview.append("")
        overview.append("[bold]Signals:[/bold]")
        overview.extend(f"  [green]+{s.points:.0f}[/green] {s.description}" for s in record.signals)
    if record.candle_count == 0 and not record.simulated:
        overview.append("\n[yellow]No candle history - indicators use neutral defaults[/yellow]")

    console.print(Panel(
        "\n".join(overview),
        title="[bold cyan]Analysis[/bold cyan]",
        border_style="cyan",
    ))
    console.print(_levels_table(record))
    console.print(Panel(
        "\n".join(_plan_lines(record)),
        title="[bold cyan]Trade Plan[/bold cyan]",
        border_style="cyan",
    ))
