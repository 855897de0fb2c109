"""
Exchange rate provider adapters.
"""

from currency_exchange.provider.rate_provider import (
    HttpRateProvider,
    RateProvider,
    StaticRateProvider,
    is_usable_rate,
    parse_rates_payload,
)

__all__ = [
    "RateProvider",
    "HttpRateProvider",
    "StaticRateProvider",
    "parse_rates_payload",
    "is_usable_rate",
]
