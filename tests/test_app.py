"""
Tests for the application runner and the command-line interface.
"""

import asyncio

import pytest
from click.testing import CliRunner

from cli import cli
from funding_monitor.connectors.connector_manager import ConnectorManager
from funding_monitor.main import FundingMonitorApp
from funding_monitor.storage.memory_storage import InMemoryStorage


class TestFundingMonitorApp:

    @pytest.mark.asyncio
    async def test_runs_until_shutdown(self, config, profitable_connectors):
        manager = ConnectorManager(list(profitable_connectors.values()))
        storage = InMemoryStorage()
        app = FundingMonitorApp(config=config.updated(poll_interval_ms=3_600_000),
                                storage=storage, connector_manager=manager)

        asyncio.get_running_loop().call_later(0.05, app.request_shutdown)
        await app.start()

        assert app.engine.stats.total_checks == 1
        assert not app.engine.is_running
        assert storage.opportunity_count == 2
        assert all(connector.closed for connector in profitable_connectors.values())

    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(self, config):
        app = FundingMonitorApp(config=config, connector_manager=ConnectorManager())

        await app.stop()

        assert app.engine is None

    def test_config_follows_runtime_updates(self, config, profitable_connectors):
        app = FundingMonitorApp(config=config,
                                connector_manager=ConnectorManager(list(profitable_connectors.values())))
        app.initialize()

        app.engine.update_config(min_profit_spread_percent=0.5)

        assert app.config is app.engine.config
        assert app.config.min_profit_spread_percent == 0.5


class TestCli:

    def test_init_then_validate(self, tmp_path):
        runner = CliRunner()
        path = str(tmp_path / "config.yaml")

        init = runner.invoke(cli, ['init', '--output', path])
        validate = runner.invoke(cli, ['validate', '--config', path])

        assert init.exit_code == 0
        assert validate.exit_code == 0
        assert "Configuration is valid" in validate.output
        assert "binance, okx, bybit" in validate.output

    def test_validate_missing_file(self, tmp_path):
        result = CliRunner().invoke(cli, ['validate', '--config', str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_validate_reports_errors(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("detection:\n  min_profit_spread_percent: -1\n")

        result = CliRunner().invoke(cli, ['validate', '--config', str(path)])

        assert result.exit_code == 1
        assert "detection.min_profit_spread_percent" in result.output
