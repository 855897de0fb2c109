"""
Service wiring.

Builds the stores, provider, registry and sync service from configuration.
"""

from dataclasses import dataclass
from typing import Optional

from currency_exchange.provider.rate_provider import HttpRateProvider, RateProvider
from currency_exchange.registry.setting_registry import SettingRegistry
from currency_exchange.services.sync_service import PriceSyncService
from currency_exchange.storage.catalog_store import CatalogStore
from currency_exchange.storage.settings_store import SettingsStore
from currency_exchange.storage.store_currencies import StoreCurrencies
from currency_exchange.utils.config_loader import AppConfig


@dataclass
class ServiceContainer:
    """All collaborators of the sync pipeline, wired together."""

    config: AppConfig
    provider: RateProvider
    settings_store: SettingsStore
    catalog: CatalogStore
    store_currencies: StoreCurrencies
    registry: SettingRegistry
    sync_service: PriceSyncService


def build_container(
    config: AppConfig,
    provider: Optional[RateProvider] = None,
) -> ServiceContainer:
    """
    Build the service container.

    Args:
        config: Application configuration.
        provider: Rate provider override. Defaults to the HTTP provider.
    """
    if provider is None:
        provider = HttpRateProvider(config)
    settings_store = SettingsStore(config.paths.settings_file)
    catalog = CatalogStore(config.paths.catalog_file)
    store_currencies = StoreCurrencies.from_config(config)
    registry = SettingRegistry(settings_store, provider, store_currencies)
    sync_service = PriceSyncService(registry, provider, catalog, store_currencies)

    return ServiceContainer(
        config=config,
        provider=provider,
        settings_store=settings_store,
        catalog=catalog,
        store_currencies=store_currencies,
        registry=registry,
        sync_service=sync_service,
    )
