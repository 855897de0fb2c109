"""
CLI entry point for the currency exchange price sync.

This module wires together all components and provides a command-line
interface for managing exchange settings and running price syncs.
"""

import argparse
import logging
import sys
from pathlib import Path

from currency_exchange.exceptions import AppException, ConfigurationError
from currency_exchange.exporter.price_exporter import build_price_matrix, write_price_matrix
from currency_exchange.models import ExchangeRateMode, ExchangeRateStatus
from currency_exchange.registry.setting_registry import SettingUpdateRequest
from currency_exchange.services.container import ServiceContainer, build_container
from currency_exchange.utils.config_loader import load_config, load_env
from currency_exchange.utils.logging_config import setup_logging_from_config

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Multi-currency price sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m currency_exchange.main enable eur
    python -m currency_exchange.main update cxs_123 --mode manual --rate 0.95
    python -m currency_exchange.main sync --dry-run
    python -m currency_exchange.main export --format csv
        """,
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Recompute variant prices")
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute prices without writing the catalog",
    )

    enable_parser = subparsers.add_parser("enable", help="Enable a currency (auto mode)")
    enable_parser.add_argument("currency_code", help="Currency code, e.g. eur")

    update_parser = subparsers.add_parser("update", help="Update an exchange setting")
    update_parser.add_argument("setting_id", help="Exchange setting id")
    update_parser.add_argument(
        "--mode", choices=[m.value for m in ExchangeRateMode], help="manual or auto"
    )
    update_parser.add_argument(
        "--status", choices=[s.value for s in ExchangeRateStatus], help="enable or disable"
    )
    update_parser.add_argument("--rate", type=float, help="Exchange rate (0-999999)")

    list_parser = subparsers.add_parser("list", help="List exchange settings")
    list_parser.add_argument("--limit", type=int, default=20)
    list_parser.add_argument("--offset", type=int, default=0)

    export_parser = subparsers.add_parser("export", help="Export variant prices")
    export_parser.add_argument("--output", "-o", type=Path, help="Output file path")
    export_parser.add_argument("--format", choices=["xlsx", "csv"], default="xlsx")

    return parser.parse_args(argv)


def run_sync(container: ServiceContainer, args: argparse.Namespace) -> int:
    result = container.sync_service.run(dry_run=args.dry_run)

    print("\n" + "=" * 60)
    print("PRICE SYNC SUMMARY")
    print("=" * 60)
    print(f"  Base currency: {result.base_currency.upper()}")
    for code, rate in result.rates.items():
        print(f"  {code.upper()}: {rate}")
    if result.unresolved_currencies:
        missing = ", ".join(c.upper() for c in result.unresolved_currencies)
        print(f"  No rate available: {missing}")
    print(f"\n  Variants updated: {result.updated_variant_count}")
    print(f"  Variants skipped: {result.skipped_variant_count}")
    if result.dry_run:
        print("\n[DRY RUN] - Catalog not written")
    print("=" * 60 + "\n")
    return 0


def run_enable(container: ServiceContainer, args: argparse.Namespace) -> int:
    setting = container.registry.enable_currency(args.currency_code)
    print(
        f"✓ {setting.currency_code.upper()} enabled "
        f"(id={setting.id}, mode={setting.mode.value}, rate={setting.exchange_rate})"
    )
    return 0


def run_update(container: ServiceContainer, args: argparse.Namespace) -> int:
    request = SettingUpdateRequest(
        status=ExchangeRateStatus(args.status) if args.status else None,
        mode=ExchangeRateMode(args.mode) if args.mode else None,
        exchange_rate=args.rate,
    )
    setting = container.registry.update_setting(args.setting_id, request)
    print(
        f"✓ {setting.currency_code.upper()}: status={setting.status.value}, "
        f"mode={setting.mode.value}, rate={setting.exchange_rate}"
    )
    return 0


def run_list(container: ServiceContainer, args: argparse.Namespace) -> int:
    settings, count = container.registry.list_settings(limit=args.limit, offset=args.offset)
    print(f"{count} exchange settings")
    for s in settings:
        print(
            f"  {s.id}  {s.currency_code.upper():<6}  {s.status.value:<7}  "
            f"{s.mode.value:<6}  {s.exchange_rate}"
        )
    return 0


def run_export(container: ServiceContainer, args: argparse.Namespace) -> int:
    variants = container.catalog.read_variants()
    base_currency = container.store_currencies.get_default_currency()
    df = build_price_matrix(variants, base_currency=base_currency)
    output_path = write_price_matrix(
        df,
        output_dir=Path(container.config.paths.output_dir),
        output_path=args.output,
        file_format=args.format,
    )
    print(f"✓ Price export written: {output_path}")
    return 0


COMMANDS = {
    "sync": run_sync,
    "enable": run_enable,
    "update": run_update,
    "list": run_list,
    "export": run_export,
}


def main(argv: list[str] | None = None, container: ServiceContainer | None = None) -> int:
    """
    Main entry point.

    Returns:
        int: Exit code.
    """
    load_env()
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"\n✗ Configuration error: {e.message}")
        return 1
    setup_logging_from_config(config, verbose=args.verbose)

    container = container or build_container(config)

    try:
        return COMMANDS[args.command](container, args)
    except AppException as e:
        logger.error(f"{e.error_code}: {e.message}")
        print(f"\n✗ Error: {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        print(f"\n✗ Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
