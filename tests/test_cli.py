"""
Tests for the command-line entry point.
"""

from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest

from currency_exchange.main import main, parse_args
from currency_exchange.services.container import ServiceContainer

from fixtures.catalog_data import make_variant, prices_by_code


@pytest.fixture
def run(container: ServiceContainer, tmp_path: Path, monkeypatch):
    """Run the CLI against the temp-dir container."""
    monkeypatch.setattr("currency_exchange.main.setup_logging_from_config", Mock())
    config_file = tmp_path / "missing.yaml"

    def _run(*argv: str) -> int:
        return main(["--config", str(config_file), *argv], container=container)

    return _run


class TestParseArgs:
    """Tests for argument parsing."""

    def test_update_arguments(self) -> None:
        """Test update options are parsed."""
        args = parse_args(["update", "cxs_1", "--mode", "manual", "--rate", "0.95"])

        assert args.command == "update"
        assert args.setting_id == "cxs_1"
        assert args.mode == "manual"
        assert args.rate == 0.95
        assert args.status is None

    def test_invalid_mode_exits(self) -> None:
        """Test argparse rejects unknown modes."""
        with pytest.raises(SystemExit):
            parse_args(["update", "cxs_1", "--mode", "sometimes"])

    def test_command_required(self) -> None:
        """Test a subcommand must be given."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestCommands:
    """Tests for CLI commands."""

    def test_enable_and_list(self, run, container: ServiceContainer, capsys) -> None:
        """Test enabling then listing a currency."""
        assert run("enable", "EUR") == 0
        assert run("list") == 0

        out = capsys.readouterr().out
        assert "EUR enabled" in out
        assert "1 exchange settings" in out
        assert container.registry.all_settings()[0].currency_code == "eur"

    def test_enable_failure_returns_1(self, run, capsys) -> None:
        """Test application errors give exit code 1."""
        assert run("enable", "xyz") == 1
        assert "Exchange rate not found for xyz" in capsys.readouterr().out

    def test_update(self, run, container: ServiceContainer) -> None:
        """Test updating mode and rate."""
        setting = container.registry.enable_currency("eur")

        assert run("update", setting.id, "--mode", "manual", "--rate", "0.95") == 0

        updated = container.registry.get_setting(setting.id)
        assert updated.mode.value == "manual"
        assert updated.exchange_rate == 0.95

    def test_update_unknown_setting(self, run) -> None:
        """Test updating a missing setting fails."""
        assert run("update", "cxs_missing", "--status", "disable") == 1

    def test_sync(self, run, container: ServiceContainer, capsys) -> None:
        """Test a sync run writes prices and prints a summary."""
        container.registry.enable_currency("eur")
        container.catalog.save_variants([make_variant("v1", usd=100)])

        assert run("sync") == 0

        assert "Variants updated: 1" in capsys.readouterr().out
        prices = container.catalog.read_variants()[0].prices
        assert prices_by_code(prices) == {"usd": 100, "eur": 92}

    def test_sync_dry_run(self, run, container: ServiceContainer, capsys) -> None:
        """Test --dry-run leaves the catalog alone."""
        container.registry.enable_currency("eur")
        container.catalog.save_variants([make_variant("v1", usd=100)])

        assert run("sync", "--dry-run") == 0

        assert "DRY RUN" in capsys.readouterr().out
        assert prices_by_code(container.catalog.read_variants()[0].prices) == {"usd": 100}

    def test_export_csv(self, run, container: ServiceContainer, tmp_path: Path) -> None:
        """Test exporting the catalog to CSV."""
        container.catalog.save_variants([make_variant("v1", usd=100, eur=92)])
        output = tmp_path / "prices.csv"

        assert run("export", "--format", "csv", "--output", str(output)) == 0

        df = pd.read_csv(output)
        assert list(df.columns) == ["variant_id", "product_id", "usd", "eur"]

    def test_malformed_config_returns_1(
        self, container: ServiceContainer, tmp_path: Path, capsys
    ) -> None:
        """Test a config file with a bad structure is reported, not raised."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("store:\n  supported_currencies: [usd]\n")

        assert main(["--config", str(config_file), "list"], container=container) == 1
        assert "Configuration error" in capsys.readouterr().out
