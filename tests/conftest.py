"""
Shared fixtures for currency exchange tests.
"""

from pathlib import Path

import pytest

from currency_exchange.provider.rate_provider import StaticRateProvider
from currency_exchange.registry.setting_registry import SettingRegistry
from currency_exchange.services.container import ServiceContainer, build_container
from currency_exchange.services.sync_service import PriceSyncService
from currency_exchange.storage.catalog_store import CatalogStore
from currency_exchange.storage.settings_store import SettingsStore
from currency_exchange.storage.store_currencies import StoreCurrencies
from currency_exchange.utils.config_loader import (
    AppConfig,
    PathsConfig,
    StoreConfig,
    SupportedCurrencyConfig,
)

from fixtures.catalog_data import DEFAULT_PROVIDER_RATES


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Configuration with files under a temp directory and USD as default."""
    return AppConfig(
        paths=PathsConfig(
            settings_file=str(tmp_path / "exchange_settings.json"),
            catalog_file=str(tmp_path / "catalog.json"),
            output_dir=str(tmp_path / "output"),
            logs_dir=str(tmp_path / "logs"),
        ),
        store=StoreConfig(
            supported_currencies=[
                SupportedCurrencyConfig("usd", True),
                SupportedCurrencyConfig("eur", False),
            ]
        ),
    )


@pytest.fixture
def provider() -> StaticRateProvider:
    return StaticRateProvider(DEFAULT_PROVIDER_RATES)


@pytest.fixture
def settings_store(app_config: AppConfig) -> SettingsStore:
    return SettingsStore(app_config.paths.settings_file)


@pytest.fixture
def catalog(app_config: AppConfig) -> CatalogStore:
    return CatalogStore(app_config.paths.catalog_file)


@pytest.fixture
def store_currencies(app_config: AppConfig) -> StoreCurrencies:
    return StoreCurrencies.from_config(app_config)


@pytest.fixture
def registry(
    settings_store: SettingsStore,
    provider: StaticRateProvider,
    store_currencies: StoreCurrencies,
) -> SettingRegistry:
    return SettingRegistry(settings_store, provider, store_currencies)


@pytest.fixture
def sync_service(
    registry: SettingRegistry,
    provider: StaticRateProvider,
    catalog: CatalogStore,
    store_currencies: StoreCurrencies,
) -> PriceSyncService:
    return PriceSyncService(registry, provider, catalog, store_currencies)


@pytest.fixture
def container(app_config: AppConfig, provider: StaticRateProvider) -> ServiceContainer:
    return build_container(app_config, provider=provider)
