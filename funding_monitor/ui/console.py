"""
Console rendering of rates, opportunities and engine statistics (rich).
"""

from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.funding_rate import FundingRate
from ..models.opportunity import ArbitrageRecord
from ..utils.time_utils import format_countdown


def _confidence_color(confidence: float) -> str:
    if confidence >= 0.8:
        return "green"
    if confidence >= 0.5:
        return "yellow"
    return "red"


def build_opportunities_table(records: Sequence[ArbitrageRecord], title: str = "💰 Arbitrage Opportunities") -> Table:
    """Table of opportunity records, in the order given"""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Symbol", style="yellow")
    table.add_column("Long", style="green")
    table.add_column("Short", style="red")
    table.add_column("Long Rate", justify="right")
    table.add_column("Short Rate", justify="right")
    table.add_column("Spread", style="green", justify="right")
    table.add_column("Annual", style="green", justify="right")
    table.add_column("Price Spread", justify="right")
    table.add_column("Confidence", justify="right")

    for record in records:
        color = _confidence_color(record['confidence'])
        table.add_row(
            record['symbol'],
            record['long_exchange'],
            record['short_exchange'],
            f"{record['long_rate']:.4f}%",
            f"{record['short_rate']:.4f}%",
            f"{record['spread_rate']:.4f}%",
            f"{record['annualized_return']:.2f}%",
            f"{record['price_spread_percent']:.3f}%",
            f"[{color}]{record['confidence']:.2f}[/{color}]"
        )

    return table


def build_rates_table(rates: Sequence[FundingRate], title: str = "📊 Funding Rates") -> Table:
    """Table of funding rates"""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Exchange", style="cyan")
    table.add_column("Symbol", style="yellow")
    table.add_column("Rate", justify="right")
    table.add_column("Mark Price", justify="right")
    table.add_column("Next Funding", justify="right")
    table.add_column("Interval", justify="right")

    for rate in rates:
        color = "green" if rate.funding_rate >= 0 else "red"
        table.add_row(
            rate.exchange,
            rate.symbol,
            f"[{color}]{rate.funding_rate_percent:.4f}%[/{color}]",
            f"{rate.mark_price:,.4f}" if rate.mark_price else "-",
            format_countdown(rate.next_funding_time),
            f"{rate.funding_interval_hours}h" if rate.funding_interval_hours else "-"
        )

    return table


def build_stats_panel(stats: Dict[str, Any], config: Optional[Dict[str, Any]] = None) -> Panel:
    """Engine statistics, with the active settings if given"""
    status = "[green]🟢 RUNNING[/green]" if stats.get('running') else "[red]🔴 STOPPED[/red]"
    lines: List[str] = [
        "[bold yellow]🤖 Engine:[/bold yellow]",
        f"  • Status: {status}",
        f"  • Total checks: {stats.get('total_checks', 0)}",
        f"  • Opportunities found: {stats.get('opportunities_found', 0)}",
        f"  • Errors: {stats.get('error_count', 0)}",
        f"  • Last check: {stats.get('last_check_duration_ms', 0):.0f}ms",
    ]

    if config:
        lines.append("")
        lines.append("[bold yellow]⚙️ Settings:[/bold yellow]")
        lines.extend(f"  • {key}: {value}" for key, value in config.items())

    return Panel("\n".join(lines), title="📈 Statistics", border_style="cyan")


def print_opportunities(records: Sequence[ArbitrageRecord], console: Optional[Console] = None):
    console = console or Console()
    if not records:
        console.print("📭 [yellow]No opportunities found[/yellow]")
        return
    console.print(build_opportunities_table(records))
