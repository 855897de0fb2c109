"""
Exchange rate provider module.

Fetches currency rates relative to a base currency from an external
JSON API, or serves a fixed mapping (static provider).

The provider is treated as partial: it may omit codes, and callers must
not assume the returned mapping is complete.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Mapping

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from currency_exchange.exceptions import RateProviderError
from currency_exchange.models import normalize_currency_code
from currency_exchange.utils.config_loader import AppConfig, get_provider_api_key

logger = logging.getLogger(__name__)


class RateProvider(ABC):
    """Source of exchange rates relative to a base currency."""

    @abstractmethod
    def fetch_rates(self, base_currency: str) -> dict[str, float]:
        """
        Fetch rates for every currency the provider knows.

        Args:
            base_currency: Currency code the rates are relative to.

        Returns:
            Dict mapping lowercase currency code -> rate.
        """
        raise NotImplementedError


class StaticRateProvider(RateProvider):
    """Provider serving a fixed rate mapping (tests, offline use)."""

    def __init__(self, rates: Mapping[str, float] | None = None) -> None:
        self.rates = {normalize_currency_code(k): float(v) for k, v in (rates or {}).items()}
        self.calls: list[str] = []

    def set_rate(self, currency_code: str, rate: float) -> None:
        self.rates[normalize_currency_code(currency_code)] = float(rate)

    def remove_rate(self, currency_code: str) -> None:
        self.rates.pop(normalize_currency_code(currency_code), None)

    def fetch_rates(self, base_currency: str) -> dict[str, float]:
        self.calls.append(normalize_currency_code(base_currency))
        return dict(self.rates)


class HttpRateProvider(RateProvider):
    """
    Provider backed by an HTTP exchange rate API.

    Expects ``GET {base_url}/{BASE}`` to return JSON with a ``rates``
    object keyed by uppercase currency codes, e.g.::

        {"result": "success", "base_code": "USD", "rates": {"EUR": 0.92}}

    Attributes:
        config: Application configuration.
        base_url: API base URL (without the base currency segment).
        timeout: Request timeout in seconds.
        session: Requests session with retry logic.
    """

    def __init__(self, config: AppConfig, api_key: str | None = None) -> None:
        """
        Initialize the HTTP rate provider.

        Args:
            config: Application configuration with provider settings.
            api_key: Optional API key. Falls back to the env var named in config.
        """
        self.config = config
        self.base_url = config.provider.base_url.rstrip("/")
        self.timeout = config.provider.timeout_seconds
        self.api_key = api_key or get_provider_api_key(config)
        self.session = self._create_session(config.provider.max_retries)

    def _create_session(self, max_retries: int) -> requests.Session:
        """Create a requests session with retry logic for transient errors."""
        session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1.0,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=["GET"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch_rates(self, base_currency: str) -> dict[str, float]:
        """
        Fetch rates relative to ``base_currency``.

        Raises:
            RateProviderError: On timeouts, connection/HTTP errors or an
                unparseable response.
        """
        base = normalize_currency_code(base_currency)
        url = f"{self.base_url}/{base.upper()}"

        logger.debug(f"Fetching exchange rates: {url}")

        try:
            response = self.session.get(url, headers=self._get_headers(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout:
            raise RateProviderError(f"Rate provider request timed out after {self.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise RateProviderError(f"Connection error fetching rates: {str(e)[:200]}")
        except requests.exceptions.HTTPError as e:
            raise RateProviderError(f"HTTP error from rate provider: {e}")
        except ValueError as e:
            raise RateProviderError(f"Invalid JSON from rate provider: {e}")

        rates = parse_rates_payload(payload)
        logger.info(f"Fetched {len(rates)} exchange rates for base {base.upper()}")
        return rates


def parse_rates_payload(payload: Any) -> dict[str, float]:
    """
    Extract a normalized rate mapping from a provider response body.

    Non-numeric, negative and non-finite entries are dropped rather than failing the
    whole snapshot.

    Raises:
        RateProviderError: If the payload reports an error or has no rates.
    """
    if not isinstance(payload, dict):
        raise RateProviderError("Unexpected rate provider response format")

    if payload.get("result") == "error":
        error_type = payload.get("error-type", "unknown")
        raise RateProviderError(f"Rate provider returned error: {error_type}")

    raw_rates = payload.get("rates")
    if not isinstance(raw_rates, dict):
        raise RateProviderError("Rate provider response has no rates")

    rates: dict[str, float] = {}
    for code, value in raw_rates.items():
        # bool is an int subclass; exclude it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug(f"Ignoring non-numeric rate for {code}: {value!r}")
            continue
        if not is_usable_rate(value):
            logger.debug(f"Ignoring negative or non-finite rate for {code}: {value}")
            continue
        rates[normalize_currency_code(code)] = float(value)

    return rates


def is_usable_rate(value: float) -> bool:
    """A rate is usable when it is finite and not negative (NaN and inf are not)."""
    try:
        rate = float(value)
    except OverflowError:
        return False
    return math.isfinite(rate) and rate >= 0
