"""
Command-line interface for the funding rate monitor.
Runs the detection loop or one-off scans without a server.
"""

import asyncio
import click
import os
import sys

from rich.console import Console

from funding_monitor.bot.funding_aggregator import FundingRateAggregator
from funding_monitor.bot.realtime import compute_realtime_opportunities
from funding_monitor.config.settings import (
    create_sample_config,
    load_config,
    validate_config_file
)
from funding_monitor.connectors.connector_manager import ConnectorManager
from funding_monitor.main import FundingMonitorApp
from funding_monitor.models.opportunity import OpportunityFilter
from funding_monitor.ui.console import build_rates_table, build_stats_panel, print_opportunities
from funding_monitor.utils.logging_utils import setup_logging


console = Console()


def _load(ctx):
    config = load_config(ctx.obj.get('config_file'))
    setup_logging(config.logging, verbose=ctx.obj.get('verbose', False))
    return config


@click.group()
@click.option('--config', '-c', help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Funding Rate Arbitrage Monitor CLI"""

    # Store options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@cli.command()
@click.pass_context
def start(ctx):
    """Start the scheduled detection loop"""

    click.echo("🚀 Starting Funding Rate Monitor...")

    app = None
    try:
        app = FundingMonitorApp(config=_load(ctx))
        asyncio.run(app.start())

    except KeyboardInterrupt:
        click.echo("\n👋 Monitor stopped by user")
    except Exception as e:
        click.echo(f"❌ Error starting monitor: {e}")
        sys.exit(1)

    if app is not None and app.engine is not None:
        console.print(build_stats_panel(app.engine.get_stats(), app.engine.get_config()))


@cli.command()
@click.option('--symbol', '-s', help='Only check this symbol (e.g. BTCUSDT)')
@click.option('--min-spread', '-m', type=float, help='Minimum spread (%), defaults to configured threshold')
@click.option('--limit', '-l', default=50, type=click.IntRange(min=0), help='Maximum results')
@click.option('--offset', '-o', default=0, type=click.IntRange(min=0), help='Results to skip')
@click.pass_context
def scan(ctx, symbol, min_spread, limit, offset):
    """Compute current arbitrage opportunities"""

    config = _load(ctx)
    query = OpportunityFilter(symbol=symbol.upper() if symbol else None,
                              min_spread=min_spread, limit=limit, offset=offset)

    click.echo("🔍 Scanning for arbitrage opportunities...")

    async def run_scan():
        manager = ConnectorManager.from_config(config)
        aggregator = FundingRateAggregator.from_config(manager.connectors, config.fetcher)
        try:
            return await compute_realtime_opportunities(aggregator, config, query)
        finally:
            await manager.close_all()

    try:
        records = asyncio.run(run_scan())
    except Exception as e:
        click.echo(f"❌ Error finding opportunities: {e}")
        sys.exit(1)

    print_opportunities(records, console)
    click.echo(f"\n📊 Total opportunities shown: {len(records)}")


@cli.command()
@click.option('--exchange', '-e', help='Show one exchange only')
@click.option('--symbol', '-s', help='Show one symbol only')
@click.option('--limit', '-l', default=20, type=click.IntRange(min=1), help='Rows per exchange')
@click.pass_context
def rates(ctx, exchange, symbol, limit):
    """Fetch and display current funding rates"""

    config = _load(ctx)

    async def run_fetch():
        manager = ConnectorManager.from_config(config)
        aggregator = FundingRateAggregator.from_config(manager.connectors, config.fetcher)
        try:
            return aggregator.exchanges, await aggregator.fetch_all(skip_cache=True)
        finally:
            await manager.close_all()

    try:
        exchanges, rate_lists = asyncio.run(run_fetch())
    except Exception as e:
        click.echo(f"❌ Error fetching funding rates: {e}")
        sys.exit(1)

    for exchange_name, exchange_rates in zip(exchanges, rate_lists):
        if exchange and exchange_name != exchange.lower():
            continue
        if not exchange_rates:
            click.echo(f"⚠️  {exchange_name}: no funding rates available")
            continue

        selected = [rate for rate in exchange_rates if not symbol or rate.symbol == symbol.upper()]
        selected.sort(key=lambda rate: abs(rate.funding_rate), reverse=True)
        console.print(build_rates_table(selected[:limit],
                                        title=f"📊 {exchange_name} ({len(exchange_rates)} symbols)"))


@cli.command()
@click.option('--output', '-o', default='config.sample.yaml', help='Output file name')
def init(output):
    """Create a sample configuration file"""

    click.echo(f"📝 Creating sample configuration: {output}")
    create_sample_config(output)

    click.echo("\n📋 Next steps:")
    click.echo("1. Rename to config.yaml and adjust thresholds")
    click.echo("2. Run: python cli.py validate")
    click.echo("3. Run: python cli.py start")


@cli.command()
@click.option('--config', '-c', help='Configuration file to validate')
def validate(config):
    """Validate configuration file"""

    config_file = config or "config.yaml"

    click.echo(f"🔍 Validating configuration: {config_file}")

    if not os.path.exists(config_file):
        click.echo(f"❌ Configuration file not found: {config_file}")
        click.echo("💡 Run 'python cli.py init' to create a sample config")
        sys.exit(1)

    is_valid, errors, monitor_config = validate_config_file(config_file)

    if not is_valid:
        click.echo("❌ Configuration has errors:")
        for error in errors:
            click.echo(f"   • {error}")
        sys.exit(1)

    click.echo("✅ Configuration is valid!")
    click.echo(f"📊 Enabled exchanges: {', '.join(monitor_config.get_enabled_exchanges())}")
    click.echo(f"⏱  Poll interval: {monitor_config.poll_interval_ms}ms")
    click.echo(f"💰 Min profit threshold: {monitor_config.min_profit_spread_percent}%")
    click.echo(f"📏 Max price spread: {monitor_config.max_price_spread_percent}%")


if __name__ == '__main__':
    cli()
