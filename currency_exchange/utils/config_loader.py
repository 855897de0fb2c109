"""
Configuration loader module.

Loads application configuration from YAML files and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from currency_exchange.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class PathsConfig:
    """File path configuration."""

    settings_file: str = "data/exchange_settings.json"
    catalog_file: str = "data/catalog.json"
    output_dir: str = "data/output"
    logs_dir: str = "logs"


@dataclass
class ProviderConfig:
    """Exchange rate provider configuration."""

    base_url: str = "https://open.er-api.com/v6/latest"
    timeout_seconds: int = 10
    max_retries: int = 3
    api_key_env: str = "EXCHANGE_RATE_API_KEY"


@dataclass
class SupportedCurrencyConfig:
    """A currency supported by the store."""

    currency_code: str
    is_default: bool = False


@dataclass
class StoreConfig:
    """Store currency configuration."""

    supported_currencies: list[SupportedCurrencyConfig] = field(
        default_factory=lambda: [SupportedCurrencyConfig("usd", True)]
    )


@dataclass
class APIConfig:
    """Admin API configuration."""

    default_limit: int = 20
    max_limit: int = 100


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"


@dataclass
class AppConfig:
    """
    Main application configuration.

    Aggregates all configuration sections into a single object.
    """

    paths: PathsConfig = field(default_factory=PathsConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_env(env_file: Path = Path(".env")) -> None:
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to .env file.
    """
    if env_file.exists():
        load_dotenv(env_file)
        logger.debug(f"Loaded environment from: {env_file}")
    else:
        logger.debug(f"No .env file found at: {env_file}")


def load_config(config_file: Path = Path("config/config.yaml")) -> AppConfig:
    """
    Load application configuration from YAML file.

    Environment overrides are applied on top of the file (or defaults).

    Args:
        config_file: Path to configuration YAML file.

    Returns:
        AppConfig: Loaded configuration object.

    Raises:
        ConfigurationError: If the file is not valid YAML or a section is malformed.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}. Using defaults.")
        return _apply_env_overrides(AppConfig())

    try:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}")

    if raw_config is None:
        return _apply_env_overrides(AppConfig())

    config = _parse_config(raw_config)
    logger.info(f"Loaded configuration from: {config_file}")
    return _apply_env_overrides(config)


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    """
    Parse raw YAML dict into AppConfig dataclass.

    Args:
        raw: Raw dictionary from YAML file.

    Returns:
        AppConfig: Parsed configuration object.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    paths_raw = _section(raw, "paths")
    paths = PathsConfig(
        settings_file=paths_raw.get("settings_file", "data/exchange_settings.json"),
        catalog_file=paths_raw.get("catalog_file", "data/catalog.json"),
        output_dir=paths_raw.get("output_dir", "data/output"),
        logs_dir=paths_raw.get("logs_dir", "logs"),
    )

    provider_raw = _section(raw, "provider")
    provider = ProviderConfig(
        base_url=provider_raw.get("base_url", "https://open.er-api.com/v6/latest"),
        timeout_seconds=provider_raw.get("timeout_seconds", 10),
        max_retries=provider_raw.get("max_retries", 3),
        api_key_env=provider_raw.get("api_key_env", "EXCHANGE_RATE_API_KEY"),
    )

    # Store currencies (mirrors the store's supported_currencies list)
    store_raw = _section(raw, "store")
    currencies_raw = store_raw.get("supported_currencies")
    if currencies_raw is None:
        store = StoreConfig()
    else:
        store = StoreConfig(supported_currencies=_parse_supported_currencies(currencies_raw))

    api_raw = _section(raw, "api")
    api = APIConfig(
        default_limit=api_raw.get("default_limit", 20),
        max_limit=api_raw.get("max_limit", 100),
    )

    logging_raw = _section(raw, "logging")
    logging_config = LoggingConfig(
        level=logging_raw.get("level", "INFO"),
        format=logging_raw.get("format", "text"),
    )

    return AppConfig(
        paths=paths,
        provider=provider,
        store=store,
        api=api,
        logging=logging_config,
    )


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section as a dict (empty when absent)."""
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config section '{name}' must be a mapping", details={"section": name}
        )
    return section


def _parse_supported_currencies(items: Any) -> list[SupportedCurrencyConfig]:
    """Parse store.supported_currencies into typed entries."""
    if not isinstance(items, list):
        raise ConfigurationError(
            "store.supported_currencies must be a list",
            details={"section": "store"},
        )

    currencies = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not str(item.get("currency_code") or "").strip():
            raise ConfigurationError(
                f"store.supported_currencies[{index}] needs a currency_code",
                details={"section": "store", "index": index},
            )
        currencies.append(
            SupportedCurrencyConfig(
                currency_code=str(item["currency_code"]).strip().lower(),
                is_default=bool(item.get("is_default", False)),
            )
        )
    return currencies


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides to a loaded config."""
    default_currency = get_env_var("CURRENCY_EXCHANGE_DEFAULT_CURRENCY")
    if default_currency:
        code = default_currency.strip().lower()
        others = [
            SupportedCurrencyConfig(c.currency_code, False)
            for c in config.store.supported_currencies
            if c.currency_code != code
        ]
        config.store.supported_currencies = [SupportedCurrencyConfig(code, True)] + others

    base_url = get_env_var("EXCHANGE_RATE_BASE_URL")
    if base_url:
        config.provider.base_url = base_url

    log_level = get_env_var("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level

    log_format = get_env_var("LOG_FORMAT")
    if log_format:
        config.logging.format = log_format

    return config


def get_env_var(key: str, default: str | None = None) -> str | None:
    """
    Get an environment variable with optional default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(key, default)


def get_provider_api_key(config: AppConfig) -> str | None:
    """
    Get the exchange rate provider API key from environment.

    Returns:
        API key if set, None otherwise.
    """
    return get_env_var(config.provider.api_key_env)
