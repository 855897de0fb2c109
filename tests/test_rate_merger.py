"""
Tests for merging provider rates with exchange settings.
"""

from currency_exchange.models import ExchangeRateMode, ExchangeRateStatus, ExchangeSetting
from currency_exchange.pricing.rate_merger import BASE_CURRENCY_RATE, merge_rates


def setting(code, rate, mode=ExchangeRateMode.AUTO, status=ExchangeRateStatus.ENABLE):
    return ExchangeSetting(
        id=f"cxs_{code}", currency_code=code, exchange_rate=rate, mode=mode, status=status
    )


class TestMergeRates:
    """Tests for merge_rates."""

    def test_base_currency_always_present(self) -> None:
        """Test the base currency gets rate 1 even with no settings."""
        merged = merge_rates([], {"eur": 0.92}, "USD")

        assert merged.rates == {"usd": BASE_CURRENCY_RATE}
        assert merged.eligible_currencies == frozenset({"usd"})

    def test_auto_setting_uses_provider_rate(self) -> None:
        """Test auto settings take the snapshot rate, not the stored one."""
        merged = merge_rates([setting("eur", 0.5)], {"eur": 0.92}, "usd")

        assert merged.rates["eur"] == 0.92
        assert "eur" in merged.eligible_currencies

    def test_manual_setting_overrides_provider(self) -> None:
        """Test manual settings keep their pinned rate."""
        merged = merge_rates(
            [setting("eur", 0.95, mode=ExchangeRateMode.MANUAL)],
            {"eur": 0.90},
            "usd",
        )

        assert merged.rates["eur"] == 0.95

    def test_disabled_setting_is_ignored(self) -> None:
        """Test disabled settings are neither eligible nor in the table."""
        merged = merge_rates(
            [setting("eur", 0.92, status=ExchangeRateStatus.DISABLE)],
            {"eur": 0.92},
            "usd",
        )

        assert "eur" not in merged.rates
        assert "eur" not in merged.eligible_currencies

    def test_provider_only_currency_not_eligible(self) -> None:
        """Test snapshot codes without a setting are dropped."""
        merged = merge_rates([setting("eur", 0.92)], {"eur": 0.92, "gbp": 0.79}, "usd")

        assert set(merged.rates) == {"usd", "eur"}
        assert "gbp" not in merged.eligible_currencies

    def test_auto_setting_missing_from_provider_stays_eligible(self) -> None:
        """Test an auto code the provider omits is eligible but unresolved."""
        merged = merge_rates([setting("jpy", 150.0)], {"eur": 0.92}, "usd")

        assert "jpy" in merged.eligible_currencies
        assert "jpy" not in merged.rates
        assert merged.unresolved_currencies() == ["jpy"]

    def test_mixed_settings(self) -> None:
        """Test a mix of modes and statuses."""
        merged = merge_rates(
            [
                setting("eur", 0.1),
                setting("gbp", 0.8, mode=ExchangeRateMode.MANUAL),
                setting("jpy", 150.0, status=ExchangeRateStatus.DISABLE),
            ],
            {"EUR": 0.92, "GBP": 0.79, "JPY": 151.3},
            "usd",
        )

        assert merged.rates == {"usd": 1.0, "eur": 0.92, "gbp": 0.8}
        assert merged.eligible_currencies == frozenset({"usd", "eur", "gbp"})
        assert merged.unresolved_currencies() == []

    def test_non_finite_provider_rate_is_unresolved(self) -> None:
        """Test an infinite or NaN snapshot value counts as missing."""
        merged = merge_rates(
            [setting("eur", 0.92), setting("gbp", 0.79)],
            {"eur": float("inf"), "gbp": float("nan")},
            "usd",
        )

        assert merged.rates == {"usd": 1.0}
        assert merged.unresolved_currencies() == ["eur", "gbp"]
