"""
Pricing module.

Merges provider and manual exchange rates into one rate table and derives
per-currency variant prices from base-currency prices.
"""

from currency_exchange.pricing.price_derivation import (
    DerivationResult,
    PriceDerivationEngine,
    convert_amount,
    derive_price_updates,
    derive_variant_prices,
)
from currency_exchange.pricing.rate_merger import merge_rates

__all__ = [
    "merge_rates",
    "PriceDerivationEngine",
    "DerivationResult",
    "convert_amount",
    "derive_variant_prices",
    "derive_price_updates",
]
