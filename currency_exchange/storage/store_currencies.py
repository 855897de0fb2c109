"""
Store currency lookup.

Resolves the store's default (base) currency from its supported
currencies. Injected wherever the base currency is needed.
"""

import logging

from currency_exchange.exceptions import BaseCurrencyNotFoundError
from currency_exchange.models import normalize_currency_code
from currency_exchange.utils.config_loader import AppConfig, SupportedCurrencyConfig

logger = logging.getLogger(__name__)


class StoreCurrencies:
    """Supported currencies of the store, one of which is the default."""

    def __init__(self, supported_currencies: list[SupportedCurrencyConfig]) -> None:
        self.supported_currencies = list(supported_currencies)

    @classmethod
    def from_config(cls, config: AppConfig) -> "StoreCurrencies":
        return cls(config.store.supported_currencies)

    def supported_codes(self) -> list[str]:
        return [normalize_currency_code(c.currency_code) for c in self.supported_currencies]

    def get_default_currency(self) -> str:
        """
        Return the lowercase default currency code.

        Raises:
            BaseCurrencyNotFoundError: If no supported currency is the default.
        """
        for currency in self.supported_currencies:
            code = normalize_currency_code(currency.currency_code)
            if currency.is_default and code:
                return code

        logger.error("[CurrencyExchange] Base currency not found in store")
        raise BaseCurrencyNotFoundError()
