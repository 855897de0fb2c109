"""
Rate merger module.

Reconciles provider-fetched rates with manually pinned rates into one
authoritative rate table for a sync, plus the set of currencies whose
prices get recomputed.
"""

import logging
from typing import Iterable, Mapping

from currency_exchange.models import (
    ExchangeRateMode,
    ExchangeSetting,
    MergedRates,
    normalize_currency_code,
)
from currency_exchange.provider.rate_provider import is_usable_rate

logger = logging.getLogger(__name__)

BASE_CURRENCY_RATE = 1.0


def merge_rates(
    settings: Iterable[ExchangeSetting],
    provider_rates: Mapping[str, float],
    base_currency: str,
) -> MergedRates:
    """
    Build the rate table and eligible currency set.

    Rules:
    - Disabled settings are ignored entirely.
    - Enabled manual settings use their stored rate.
    - Enabled auto settings use the provider rate when present. When the
      provider omits the code or reports a non-finite value, the currency stays eligible but gets no
      table entry, so every variant is skipped for that sync.
    - The base currency is always eligible with rate 1.

    Args:
        settings: All exchange settings.
        provider_rates: Provider snapshot relative to the base currency.
        base_currency: Default currency code.

    Returns:
        MergedRates: Rate table and eligible currencies.
    """
    base = normalize_currency_code(base_currency)
    snapshot = {normalize_currency_code(k): v for k, v in provider_rates.items()}

    rates: dict[str, float] = {}
    eligible: set[str] = set()
    manual_count = 0
    auto_count = 0

    for setting in settings:
        if not setting.is_enabled:
            continue

        code = normalize_currency_code(setting.currency_code)
        eligible.add(code)

        if setting.mode == ExchangeRateMode.MANUAL:
            rates[code] = setting.exchange_rate
            manual_count += 1
            logger.debug(
                f"[CurrencyExchange] Using manual rate for {code.upper()}: {setting.exchange_rate}"
            )
        elif code in snapshot and is_usable_rate(snapshot[code]):
            rates[code] = snapshot[code]
            auto_count += 1
            logger.debug(f"[CurrencyExchange] Using auto rate for {code.upper()}: {snapshot[code]}")
        else:
            logger.warning(
                f"[CurrencyExchange] No provider rate for AUTO currency {code.upper()}; "
                f"variants cannot be re-priced this sync"
            )

    logger.info(
        f"[CurrencyExchange] Enabled currencies: {len(eligible)} "
        f"({manual_count} manual, {auto_count} auto)"
    )

    eligible.add(base)
    rates[base] = BASE_CURRENCY_RATE

    return MergedRates(rates=rates, eligible_currencies=frozenset(eligible))
