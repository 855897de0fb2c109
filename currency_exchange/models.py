"""
Data models for exchange settings, rate tables and catalog prices.

Contains typed dataclasses/enums shared by the registry, the pricing
engine and the storage adapters.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

MAX_EXCHANGE_RATE = 999999
MAX_CURRENCY_CODE_LENGTH = 6


class ExchangeRateMode(str, Enum):
    """Where a setting's rate comes from."""

    MANUAL = "manual"
    AUTO = "auto"


class ExchangeRateStatus(str, Enum):
    """Whether a setting participates in price propagation."""

    ENABLE = "enable"
    DISABLE = "disable"


def normalize_currency_code(code: str) -> str:
    """Normalize a currency code for comparison and storage (lowercase)."""
    return (code or "").strip().lower()


@dataclass
class ExchangeSetting:
    """
    Per-currency exchange rate setting.

    Attributes:
        id: Opaque identifier assigned on creation.
        currency_code: Lowercase currency code (1-6 chars).
        exchange_rate: Rate relative to the base currency.
        mode: manual (pinned) or auto (provider-sourced).
        status: enable or disable.
        created_at: ISO timestamp of creation.
        updated_at: ISO timestamp of the last write.
    """

    id: str
    currency_code: str
    exchange_rate: float
    mode: ExchangeRateMode = ExchangeRateMode.AUTO
    status: ExchangeRateStatus = ExchangeRateStatus.ENABLE
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_enabled(self) -> bool:
        return self.status == ExchangeRateStatus.ENABLE

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "currency_code": self.currency_code,
            "exchange_rate": self.exchange_rate,
            "mode": self.mode.value,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExchangeSetting":
        """Create from a stored dictionary."""
        return cls(
            id=data["id"],
            currency_code=normalize_currency_code(data["currency_code"]),
            exchange_rate=float(data.get("exchange_rate", 0.0)),
            mode=ExchangeRateMode(data.get("mode", ExchangeRateMode.AUTO.value)),
            status=ExchangeRateStatus(data.get("status", ExchangeRateStatus.ENABLE.value)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class SettingChangeset:
    """
    Immutable set of field changes for one exchange setting.

    A field left as None is not part of the change.
    """

    status: ExchangeRateStatus | None = None
    mode: ExchangeRateMode | None = None
    exchange_rate: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.changed_fields()

    def changed_fields(self) -> list[str]:
        """Names of the fields carried by this changeset, in fixed order."""
        return [
            name
            for name in ("status", "mode", "exchange_rate")
            if getattr(self, name) is not None
        ]

    def apply_to(self, setting: ExchangeSetting) -> ExchangeSetting:
        """Return a copy of ``setting`` with the changes applied."""
        changes = {name: getattr(self, name) for name in self.changed_fields()}
        return replace(setting, **changes)


@dataclass(frozen=True)
class MergedRates:
    """
    Authoritative rate table produced for one sync.

    Attributes:
        rates: Currency code -> resolved rate. The base currency maps to 1.
        eligible_currencies: Codes whose prices are recomputed. May contain
            codes with no entry in ``rates`` (auto mode, provider omitted them).
    """

    rates: dict[str, float]
    eligible_currencies: frozenset[str]

    def unresolved_currencies(self) -> list[str]:
        """Eligible codes with no rate table entry."""
        return sorted(code for code in self.eligible_currencies if code not in self.rates)


@dataclass
class PriceRecord:
    """
    A single per-currency price of a variant.

    Attributes:
        currency_code: Lowercase currency code.
        amount: Integer amount in minor units.
        id: Existing record identifier (None for inserts).
    """

    currency_code: str
    amount: int
    id: str | None = None

    def __post_init__(self) -> None:
        self.currency_code = normalize_currency_code(self.currency_code)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"currency_code": self.currency_code, "amount": self.amount}
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceRecord":
        return cls(
            currency_code=normalize_currency_code(data["currency_code"]),
            amount=int(data["amount"]),
            id=data.get("id"),
        )


@dataclass
class Variant:
    """A product variant with its existing per-currency prices."""

    id: str
    prices: list[PriceRecord] = field(default_factory=list)
    product_id: str | None = None

    def find_price(self, currency_code: str) -> PriceRecord | None:
        """Return the price record for ``currency_code``, if any."""
        code = normalize_currency_code(currency_code)
        for price in self.prices:
            if price.currency_code == code:
                return price
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "prices": [p.to_dict() for p in self.prices]}
        if self.product_id is not None:
            data["product_id"] = self.product_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Variant":
        return cls(
            id=data["id"],
            prices=[PriceRecord.from_dict(p) for p in data.get("prices", [])],
            product_id=data.get("product_id"),
        )


@dataclass
class VariantPriceUpdate:
    """Full replacement price set for one variant."""

    variant_id: str
    prices: list[PriceRecord]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.variant_id, "prices": [p.to_dict() for p in self.prices]}
