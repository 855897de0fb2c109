"""
Custom exceptions for the currency exchange service.

Provides a hierarchy of exceptions so callers (API routes, CLI, sync
orchestration) can tell failure kinds apart and decide whether to retry.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AppException):
    """Raised when input validation fails."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class BaseCurrencyNotFoundError(AppException):
    """Raised when the store has no default currency configured."""

    status_code = 409
    error_code = "BASE_CURRENCY_NOT_FOUND"

    def __init__(self, message: str = "Base currency not found"):
        super().__init__(message)


class RateNotFoundForCurrencyError(AppException):
    """Raised when the rate provider has no rate for a requested currency."""

    status_code = 422
    error_code = "RATE_NOT_FOUND"

    def __init__(self, currency_code: str, base_currency: Optional[str] = None):
        details = {"currency_code": currency_code}
        if base_currency:
            details["base_currency"] = base_currency
        super().__init__(f"Exchange rate not found for {currency_code}", details)
        self.currency_code = currency_code


class SettingNotFoundError(AppException):
    """Raised when an exchange setting does not exist."""

    status_code = 404
    error_code = "SETTING_NOT_FOUND"

    def __init__(self, setting_id: str):
        super().__init__("Setting not found", details={"id": setting_id})
        self.setting_id = setting_id


class ConfigurationError(AppException):
    """Raised when configuration is missing or invalid."""

    status_code = 500
    error_code = "CONFIGURATION_ERROR"


class CatalogError(AppException):
    """Raised when the catalog cannot be read or written."""

    status_code = 500
    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path} if path else {}
        super().__init__(message, details)


class SettingsStoreError(AppException):
    """Raised when the settings file cannot be read; nothing is written over it."""

    status_code = 500
    error_code = "SETTINGS_STORE_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path} if path else {}
        super().__init__(message, details)


class RateProviderError(AppException):
    """Raised when the external exchange rate provider fails."""

    status_code = 502
    error_code = "RATE_PROVIDER_ERROR"

    def __init__(self, message: str, provider: str = "exchange-rate-api"):
        super().__init__(message, details={"provider": provider})
