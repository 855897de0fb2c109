"""
Pydantic models for admin API requests and responses.

Provides request validation at the API boundary: the core is only called
with inputs that passed these schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from currency_exchange.models import (
    MAX_CURRENCY_CODE_LENGTH,
    MAX_EXCHANGE_RATE,
    ExchangeRateMode,
    ExchangeRateStatus,
    ExchangeSetting,
)


class UpdateCurrencyExchangeSettingRequest(BaseModel):
    """
    Request model for updating a currency exchange setting.

    Only the listed fields may be sent; each is optional.
    """

    model_config = ConfigDict(extra="forbid")

    exchange_rate: Optional[float] = Field(
        None,
        ge=0,
        le=MAX_EXCHANGE_RATE,
        description="Exchange rate relative to the base currency (0-999999)",
    )
    mode: Optional[ExchangeRateMode] = Field(None, description="manual or auto")
    status: Optional[ExchangeRateStatus] = Field(None, description="enable or disable")
    currency_code: Optional[str] = Field(
        None,
        min_length=1,
        max_length=MAX_CURRENCY_CODE_LENGTH,
        description="Currency code (accepted, not changeable)",
    )


class EnableCurrencyRequest(BaseModel):
    """Request model for enabling a currency."""

    currency_code: str = Field(
        ...,
        min_length=1,
        max_length=MAX_CURRENCY_CODE_LENGTH,
        description="Currency code to enable",
    )

    @field_validator("currency_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Strip whitespace and lowercase the code."""
        v = v.strip().lower()
        if not v:
            raise ValueError("currency_code must not be blank")
        return v


class CurrencyExchangeSettingResponse(BaseModel):
    """Serialized exchange setting."""

    id: str
    currency_code: str
    exchange_rate: float
    mode: ExchangeRateMode
    status: ExchangeRateStatus
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_setting(cls, setting: ExchangeSetting) -> "CurrencyExchangeSettingResponse":
        return cls(**setting.to_dict())


class CurrencyExchangeSettingEnvelope(BaseModel):
    """Single setting response."""

    currency_exchange_setting: CurrencyExchangeSettingResponse


class CurrencyExchangeSettingList(BaseModel):
    """Paginated list of settings."""

    currency_exchange_settings: List[CurrencyExchangeSettingResponse] = Field(
        default_factory=list
    )
    count: int = Field(0, ge=0)
    limit: int
    offset: int


class SyncResponse(BaseModel):
    """Response model for the price sync endpoint."""

    success: bool
    base_currency: str
    rates: Dict[str, float]
    eligible_currencies: List[str]
    unresolved_currencies: List[str] = Field(default_factory=list)
    updated_variant_count: int
    skipped_variant_count: int
    dry_run: bool = False
    message: str


class ErrorResponse(BaseModel):
    """Error body rendered from AppException.to_dict()."""

    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
