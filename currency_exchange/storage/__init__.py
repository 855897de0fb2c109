"""
Storage modules for data persistence.
"""

from currency_exchange.storage.catalog_store import CatalogStore
from currency_exchange.storage.settings_store import SettingsStore
from currency_exchange.storage.store_currencies import StoreCurrencies

__all__ = [
    "CatalogStore",
    "SettingsStore",
    "StoreCurrencies",
]
