"""
Price sync service.

Runs the full sync pipeline:
resolve base currency → fetch provider rates → merge with settings →
read catalog → derive prices → write catalog.

The pipeline is idempotent for unchanged inputs, so a failed run can be
retried from the start.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from currency_exchange.pricing.price_derivation import PriceDerivationEngine
from currency_exchange.pricing.rate_merger import merge_rates
from currency_exchange.provider.rate_provider import RateProvider
from currency_exchange.registry.setting_registry import SettingRegistry
from currency_exchange.storage.catalog_store import CatalogStore
from currency_exchange.storage.store_currencies import StoreCurrencies
from currency_exchange.utils.logging_config import LogContext

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of one price sync."""

    base_currency: str
    rates: dict[str, float]
    eligible_currencies: list[str]
    unresolved_currencies: list[str]
    updated_variant_count: int
    skipped_variant_count: int
    dry_run: bool = False
    skipped_variant_ids: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.dry_run:
            return "Dry run: product variant prices computed but not written"
        return "Product variant prices updated successfully based on exchange rates"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "base_currency": self.base_currency,
            "rates": self.rates,
            "eligible_currencies": self.eligible_currencies,
            "unresolved_currencies": self.unresolved_currencies,
            "updated_variant_count": self.updated_variant_count,
            "skipped_variant_count": self.skipped_variant_count,
            "dry_run": self.dry_run,
            "message": self.message,
        }


class PriceSyncService:
    """
    Service sequencing rate merge, price derivation and catalog write.

    Errors from any step propagate unchanged so the caller can decide
    whether to retry the whole sync.
    """

    def __init__(
        self,
        registry: SettingRegistry,
        provider: RateProvider,
        catalog: CatalogStore,
        store_currencies: StoreCurrencies,
    ) -> None:
        self.registry = registry
        self.provider = provider
        self.catalog = catalog
        self.store_currencies = store_currencies
        self.logger = logging.getLogger(f"{__name__}.PriceSyncService")

    def run(self, dry_run: bool = False) -> SyncResult:
        """
        Run the sync.

        Args:
            dry_run: Compute updates without writing the catalog.

        Returns:
            SyncResult summary.

        Raises:
            BaseCurrencyNotFoundError: If no default currency is configured.
            RateProviderError: If the provider cannot be reached.
            CatalogError: If the catalog cannot be read or written.
        """
        # Step 1: Resolve base currency
        base_currency = self.store_currencies.get_default_currency()

        with LogContext(self.logger, base_currency=base_currency, dry_run=dry_run):
            self.logger.info(
                f"[CurrencyExchange] Fetching exchange rates with base currency: "
                f"{base_currency.upper()}"
            )

            # Step 2: Fetch provider rates
            provider_rates = self.provider.fetch_rates(base_currency)
            self.logger.info(
                f"[CurrencyExchange] Received {len(provider_rates)} exchange rates from provider"
            )

            # Step 3: Merge with settings
            settings = self.registry.all_settings()
            self.logger.info(
                f"[CurrencyExchange] Found {len(settings)} currency exchange settings"
            )
            merged = merge_rates(settings, provider_rates, base_currency)

            # Step 4: Read catalog
            variants = self.catalog.read_variants()
            self.logger.info(f"[CurrencyExchange] Found {len(variants)} variants in catalog")

            # Step 5: Derive prices
            engine = PriceDerivationEngine(merged, base_currency)
            derivation = engine.derive_batch(variants)

            if not derivation.updates:
                self.logger.warning(
                    "[CurrencyExchange] No variants will be updated. "
                    "Check base prices and exchange rate settings."
                )

            # Step 6: Write catalog
            if dry_run:
                self.logger.info("[CurrencyExchange] Dry run - catalog not written")
            else:
                self.catalog.apply_price_replacements(derivation.updates)

        return SyncResult(
            base_currency=base_currency,
            rates=dict(sorted(merged.rates.items())),
            eligible_currencies=sorted(merged.eligible_currencies),
            unresolved_currencies=merged.unresolved_currencies(),
            updated_variant_count=len(derivation.updates),
            skipped_variant_count=derivation.skipped,
            dry_run=dry_run,
            skipped_variant_ids=derivation.skipped_variant_ids,
        )
