"""
Price derivation engine.

Recomputes every variant's per-currency prices from its base-currency
price and the merged rate table.

Formula: amount = round(base_amount × rate), half-up on the float product,
integer minor units.

A variant is re-priced only when every eligible currency yields a positive
amount. Otherwise it is skipped and its stored prices stay as they are.
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from currency_exchange.models import (
    MergedRates,
    PriceRecord,
    Variant,
    VariantPriceUpdate,
    normalize_currency_code,
)

logger = logging.getLogger(__name__)


@dataclass
class DerivationResult:
    """Outcome of deriving prices for a batch of variants."""

    updates: list[VariantPriceUpdate] = field(default_factory=list)
    processed: int = 0
    skipped: int = 0
    skipped_variant_ids: list[str] = field(default_factory=list)


def convert_amount(base_amount: int, rate: float) -> int:
    """
    Convert a base-currency amount with a rate.

    Args:
        base_amount: Amount in base-currency minor units.
        rate: Exchange rate relative to the base currency.

    Returns:
        int: Rounded amount in target-currency minor units.
    """
    # Rounded as the float product: 50 × 0.29 is 14.4999... and gives 14
    converted = Decimal(base_amount * rate)
    return int(converted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PriceDerivationEngine:
    """
    Derives replacement price sets for variants.

    Attributes:
        merged: Rate table and eligible currencies for this sync.
        base_currency: Default currency code.
    """

    def __init__(self, merged: MergedRates, base_currency: str) -> None:
        self.merged = merged
        self.base_currency = normalize_currency_code(base_currency)
        # Base first, then the rest in a stable order
        self.currencies = [self.base_currency] + sorted(
            code for code in merged.eligible_currencies if code != self.base_currency
        )

    def target_amount(self, currency_code: str, base_amount: int) -> int | None:
        """
        Amount for one eligible currency, or None when it cannot be resolved.
        """
        if currency_code == self.base_currency:
            amount = base_amount
        else:
            rate = self.merged.rates.get(currency_code)
            if rate is None or not math.isfinite(rate) or rate <= 0:
                return None
            amount = convert_amount(base_amount, rate)

        if amount <= 0:
            return None
        return amount

    def derive_variant(self, variant: Variant) -> VariantPriceUpdate | None:
        """
        Derive the full replacement price set for one variant.

        Returns:
            VariantPriceUpdate, or None if the variant has no base price or
            any eligible currency cannot be resolved.
        """
        base_price = variant.find_price(self.base_currency)
        if base_price is None:
            logger.debug(
                f"[CurrencyExchange] Skipping variant {variant.id}: "
                f"no base price in {self.base_currency.upper()}"
            )
            return None

        new_prices: list[PriceRecord] = []
        for code in self.currencies:
            amount = self.target_amount(code, base_price.amount)
            if amount is None:
                logger.debug(
                    f"[CurrencyExchange] Skipping variant {variant.id}: "
                    f"cannot resolve price in {code.upper()}"
                )
                return None

            existing = variant.find_price(code)
            new_prices.append(
                PriceRecord(
                    currency_code=code,
                    amount=amount,
                    id=existing.id if existing else None,
                )
            )

        # Prices of non-eligible (disabled/unknown) currencies are kept as-is
        kept_prices = [
            PriceRecord(currency_code=p.currency_code, amount=p.amount, id=p.id)
            for p in variant.prices
            if p.currency_code not in self.merged.eligible_currencies
        ]

        return VariantPriceUpdate(variant_id=variant.id, prices=new_prices + kept_prices)

    def derive_batch(self, variants: Iterable[Variant]) -> DerivationResult:
        """Derive replacement price sets for every variant."""
        result = DerivationResult()

        for variant in variants:
            update = self.derive_variant(variant)
            if update is None:
                result.skipped += 1
                result.skipped_variant_ids.append(variant.id)
            else:
                result.updates.append(update)
                result.processed += 1

        logger.info(f"[CurrencyExchange] Prepared {len(result.updates)} variant updates")
        logger.info(
            f"[CurrencyExchange] Variants processed: {result.processed}, skipped: {result.skipped}"
        )
        return result


def derive_variant_prices(
    variant: Variant,
    merged: MergedRates,
    base_currency: str,
) -> VariantPriceUpdate | None:
    """Convenience function to derive one variant's replacement prices."""
    return PriceDerivationEngine(merged, base_currency).derive_variant(variant)


def derive_price_updates(
    variants: Iterable[Variant],
    merged: MergedRates,
    base_currency: str,
) -> DerivationResult:
    """Convenience function to derive replacement prices for a batch."""
    return PriceDerivationEngine(merged, base_currency).derive_batch(variants)
