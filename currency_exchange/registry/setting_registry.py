"""
Exchange setting registry.

Owns the collection of per-currency exchange settings and enforces the
mode/status transition rules:

1. A supplied ``status`` that differs from the current one is applied,
   independently of the mode/rate handling below.
2. ``mode=auto`` on a setting that is not auto fetches the provider rate
   for the setting's currency. The rate is applied when found; when the
   provider omits the currency the mode still flips and the stored rate
   is kept.
3. Otherwise ``mode=manual`` on a setting that is not manual flips the
   mode and applies ``exchange_rate`` if supplied.
4. Otherwise a supplied ``exchange_rate`` is a rate-only update.
5. An update that changes nothing succeeds without writing.

Mutations are serialized per currency code.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from currency_exchange.exceptions import (
    RateNotFoundForCurrencyError,
    SettingNotFoundError,
    ValidationError,
)
from currency_exchange.models import (
    MAX_CURRENCY_CODE_LENGTH,
    MAX_EXCHANGE_RATE,
    ExchangeRateMode,
    ExchangeRateStatus,
    ExchangeSetting,
    SettingChangeset,
    normalize_currency_code,
)
from currency_exchange.provider.rate_provider import RateProvider, is_usable_rate
from currency_exchange.storage.settings_store import SettingsStore
from currency_exchange.storage.store_currencies import StoreCurrencies

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0


@dataclass(frozen=True)
class SettingUpdateRequest:
    """Fields an update request may carry; None means "not supplied"."""

    status: Optional[ExchangeRateStatus] = None
    mode: Optional[ExchangeRateMode] = None
    exchange_rate: Optional[float] = None


AutoRateLookup = Callable[[ExchangeSetting], Optional[float]]


def plan_update(
    current: ExchangeSetting,
    request: SettingUpdateRequest,
    lookup_auto_rate: AutoRateLookup,
) -> SettingChangeset:
    """
    Decide the changeset for an update request.

    ``lookup_auto_rate`` is only called when the request switches the
    setting to auto mode; it returns the provider rate for the setting's
    currency or None when the provider has none.
    """
    status = None
    mode = None
    exchange_rate = None

    if request.status is not None and request.status != current.status:
        status = request.status

    if request.mode == ExchangeRateMode.AUTO and current.mode != ExchangeRateMode.AUTO:
        mode = ExchangeRateMode.AUTO
        exchange_rate = lookup_auto_rate(current)
    elif request.mode == ExchangeRateMode.MANUAL and current.mode != ExchangeRateMode.MANUAL:
        mode = ExchangeRateMode.MANUAL
        exchange_rate = request.exchange_rate
    elif request.exchange_rate is not None:
        exchange_rate = request.exchange_rate

    return SettingChangeset(status=status, mode=mode, exchange_rate=exchange_rate)


def _validate_currency_code(currency_code: str) -> str:
    code = normalize_currency_code(currency_code)
    if not 1 <= len(code) <= MAX_CURRENCY_CODE_LENGTH:
        raise ValidationError(
            f"currency_code must be 1-{MAX_CURRENCY_CODE_LENGTH} characters",
            details={"currency_code": currency_code},
        )
    return code


def _usable_provider_rate(rates: dict[str, float], code: str) -> Optional[float]:
    """Provider rate for a code, or None when absent, non-finite or out of range."""
    rate = rates.get(code)
    if rate is None or not is_usable_rate(rate) or rate > MAX_EXCHANGE_RATE:
        return None
    return rate


def _validate_rate(exchange_rate: Optional[float]) -> None:
    if exchange_rate is None:
        return
    if not 0 <= exchange_rate <= MAX_EXCHANGE_RATE:
        raise ValidationError(
            f"exchange_rate must be between 0 and {MAX_EXCHANGE_RATE}",
            details={"exchange_rate": exchange_rate},
        )


class SettingRegistry:
    """
    Registry of exchange settings with state-transition enforcement.

    Attributes:
        store: Settings persistence.
        provider: Exchange rate provider.
        store_currencies: Resolves the base (default) currency.
    """

    def __init__(
        self,
        store: SettingsStore,
        provider: RateProvider,
        store_currencies: StoreCurrencies,
    ) -> None:
        self.store = store
        self.provider = provider
        self.store_currencies = store_currencies
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _code_lock(self, currency_code: str) -> threading.Lock:
        """Get the lock serializing mutations of one currency code."""
        with self._locks_guard:
            lock = self._locks.get(currency_code)
            if lock is None:
                lock = threading.Lock()
                self._locks[currency_code] = lock
            return lock

    def get_setting(self, setting_id: str) -> ExchangeSetting:
        """
        Get a setting by id.

        Raises:
            SettingNotFoundError: If no setting has this id.
        """
        setting = self.store.get(setting_id)
        if setting is None:
            raise SettingNotFoundError(setting_id)
        return setting

    def list_settings(
        self,
        limit: int = DEFAULT_LIMIT,
        offset: int = DEFAULT_OFFSET,
        currency_code: Optional[str] = None,
        status: Optional[ExchangeRateStatus] = None,
        mode: Optional[ExchangeRateMode] = None,
    ) -> tuple[list[ExchangeSetting], int]:
        """
        List settings with pagination.

        Returns:
            Tuple of (page of settings, total matching count).
        """
        settings = self.store.list(currency_code=currency_code, status=status, mode=mode)
        return settings[offset : offset + limit], len(settings)

    def all_settings(self) -> list[ExchangeSetting]:
        return self.store.list()

    def enable_currency(self, currency_code: str) -> ExchangeSetting:
        """
        Enable a currency in auto mode with a fresh provider rate.

        Creates the setting if none exists for the code. An existing
        setting (enabled or not, manual or not) is forced to
        ``status=enable``, ``mode=auto`` and the fresh rate.

        Raises:
            BaseCurrencyNotFoundError: If no default currency is configured.
            RateNotFoundForCurrencyError: If the provider has no rate for the code.
            ValidationError: For a malformed code or the base currency itself.
        """
        code = _validate_currency_code(currency_code)

        with self._code_lock(code):
            base_currency = self.store_currencies.get_default_currency()
            if code == base_currency:
                raise ValidationError(
                    f"{code.upper()} is the base currency and always has rate 1",
                    details={"currency_code": code},
                )

            rates = self.provider.fetch_rates(base_currency)
            rate = _usable_provider_rate(rates, code)
            if rate is None:
                logger.warning(
                    f"[CurrencyExchange] No exchange rate found for {code.upper()} from provider"
                )
                raise RateNotFoundForCurrencyError(code, base_currency)

            existing = self.store.find_by_code(code)
            if existing is not None:
                logger.info(
                    f"[CurrencyExchange] Re-enabling {code.upper()} in AUTO mode with rate {rate}"
                )
                return self.store.update(
                    existing.id,
                    SettingChangeset(
                        status=ExchangeRateStatus.ENABLE,
                        mode=ExchangeRateMode.AUTO,
                        exchange_rate=rate,
                    ),
                )

            logger.info(f"[CurrencyExchange] Enabling {code.upper()} in AUTO mode with rate {rate}")
            return self.store.create(
                currency_code=code,
                exchange_rate=rate,
                mode=ExchangeRateMode.AUTO,
                status=ExchangeRateStatus.ENABLE,
            )

    def update_setting(self, setting_id: str, request: SettingUpdateRequest) -> ExchangeSetting:
        """
        Apply an update request to an existing setting.

        Raises:
            SettingNotFoundError: If no setting has this id.
            BaseCurrencyNotFoundError: When switching to auto without a default currency.
        """
        _validate_rate(request.exchange_rate)
        logger.info(f"[CurrencyExchange] Updating currency exchange setting: {setting_id}")

        current = self.get_setting(setting_id)

        with self._code_lock(current.currency_code):
            # Re-read under the lock so the plan sees the latest state
            current = self.get_setting(setting_id)
            code = current.currency_code.upper()
            logger.debug(
                f"[CurrencyExchange] Current setting for {code}: mode={current.mode.value}, "
                f"rate={current.exchange_rate}, status={current.status.value}"
            )

            changeset = plan_update(current, request, self._lookup_auto_rate)

            if changeset.is_empty:
                logger.info(f"[CurrencyExchange] No changes detected for {code}")
                return current

            if changeset.status is not None:
                logger.info(
                    f"[CurrencyExchange] Status change for {code}: "
                    f"{current.status.value} -> {changeset.status.value}"
                )
            logger.info(
                f"[CurrencyExchange] Applying updates to {code}: "
                f"{', '.join(changeset.changed_fields())}"
            )
            updated = self.store.update(setting_id, changeset)

        logger.info(f"[CurrencyExchange] Successfully updated currency exchange setting for {code}")
        return updated

    def _lookup_auto_rate(self, setting: ExchangeSetting) -> Optional[float]:
        """Fetch the provider rate for a setting being switched to auto."""
        code = setting.currency_code
        logger.info(f"[CurrencyExchange] Switching {code.upper()} to AUTO mode")

        base_currency = self.store_currencies.get_default_currency()
        logger.debug(
            f"[CurrencyExchange] Fetching exchange rates from provider with base currency: "
            f"{base_currency.upper()}"
        )
        rates = self.provider.fetch_rates(base_currency)

        rate = _usable_provider_rate(rates, code)
        if rate is None:
            # Mode still flips to auto; the stored rate is kept
            logger.warning(
                f"[CurrencyExchange] No exchange rate found for {code.upper()} from provider"
            )
        else:
            logger.info(f"[CurrencyExchange] Fetched AUTO rate for {code.upper()}: {rate}")
        return rate
