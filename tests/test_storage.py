"""
Tests for settings, catalog and store currency storage.
"""

import json
from pathlib import Path

import pytest

from currency_exchange.exceptions import (
    BaseCurrencyNotFoundError,
    CatalogError,
    SettingNotFoundError,
    SettingsStoreError,
)
from currency_exchange.models import (
    ExchangeRateMode,
    ExchangeRateStatus,
    PriceRecord,
    SettingChangeset,
    VariantPriceUpdate,
)
from currency_exchange.registry.setting_registry import SettingRegistry
from currency_exchange.storage.catalog_store import CatalogStore
from currency_exchange.storage.settings_store import SettingsStore
from currency_exchange.storage.store_currencies import StoreCurrencies
from currency_exchange.utils.config_loader import SupportedCurrencyConfig

from fixtures.catalog_data import make_variant, prices_by_code


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_create_and_reload(self, tmp_path: Path) -> None:
        """Test created settings persist across store instances."""
        path = tmp_path / "settings.json"
        store = SettingsStore(str(path))

        created = store.create("EUR", 0.92)

        reloaded = SettingsStore(str(path)).get(created.id)
        assert reloaded == created
        assert reloaded.currency_code == "eur"
        assert reloaded.mode == ExchangeRateMode.AUTO
        assert reloaded.status == ExchangeRateStatus.ENABLE

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Test a store without a file lists nothing."""
        assert SettingsStore(str(tmp_path / "none.json")).list() == []

    def test_list_sorted_and_filtered(self, settings_store: SettingsStore) -> None:
        """Test listing orders by code and applies filters."""
        settings_store.create("gbp", 0.79, mode=ExchangeRateMode.MANUAL)
        settings_store.create("eur", 0.92)

        assert [s.currency_code for s in settings_store.list()] == ["eur", "gbp"]
        assert [s.currency_code for s in settings_store.list(mode=ExchangeRateMode.MANUAL)] == [
            "gbp"
        ]
        assert settings_store.find_by_code("EUR").currency_code == "eur"
        assert settings_store.find_by_code("jpy") is None

    def test_update_applies_changeset(self, settings_store: SettingsStore) -> None:
        """Test only changeset fields are modified."""
        created = settings_store.create("eur", 0.92)

        updated = settings_store.update(
            created.id, SettingChangeset(status=ExchangeRateStatus.DISABLE)
        )

        assert updated.status == ExchangeRateStatus.DISABLE
        assert updated.exchange_rate == 0.92
        assert updated.created_at == created.created_at
        assert settings_store.get(created.id) == updated

    def test_update_unknown_raises(self, settings_store: SettingsStore) -> None:
        """Test updating a missing id raises."""
        with pytest.raises(SettingNotFoundError):
            settings_store.update("cxs_nope", SettingChangeset(exchange_rate=1.0))

    def test_file_format(self, tmp_path: Path) -> None:
        """Test the on-disk JSON layout."""
        path = tmp_path / "settings.json"
        SettingsStore(str(path)).create("eur", 0.92)

        data = json.loads(path.read_text())

        assert list(data) == ["settings"]
        assert data["settings"][0]["mode"] == "auto"
        assert data["settings"][0]["status"] == "enable"

    def test_corrupt_file_raises_and_is_not_overwritten(
        self, tmp_path: Path, provider, store_currencies
    ) -> None:
        """Test an unreadable settings file blocks writes instead of being replaced."""
        path = tmp_path / "settings.json"
        truncated = '{"settings": [{"id": "cxs_jpy", "currency_code": "jpy", "status": "disa'
        path.write_text(truncated)
        registry = SettingRegistry(SettingsStore(str(path)), provider, store_currencies)

        with pytest.raises(SettingsStoreError) as exc_info:
            registry.enable_currency("eur")

        assert exc_info.value.details["path"] == str(path)
        assert path.read_text() == truncated

    def test_invalid_entry_raises(self, tmp_path: Path) -> None:
        """Test a parseable file with a malformed entry raises."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"settings": [{"currency_code": "eur"}]}))

        with pytest.raises(SettingsStoreError):
            SettingsStore(str(path)).list()


class TestSharedSettingsFile:
    """Tests for several stores (processes) sharing one settings file."""

    def test_writes_from_both_stores_are_kept(self, tmp_path: Path) -> None:
        """Test a store with a loaded copy does not drop another store's write."""
        path = str(tmp_path / "settings.json")
        first = SettingsStore(path)
        second = SettingsStore(path)
        first.list()
        second.list()

        first.create("eur", 0.92)
        second.create("gbp", 0.79)

        codes = [s.currency_code for s in SettingsStore(path).list()]
        assert codes == ["eur", "gbp"]

    def test_reads_see_other_store_writes(self, tmp_path: Path) -> None:
        """Test a cached store picks up changes written by another store."""
        path = str(tmp_path / "settings.json")
        first = SettingsStore(path)
        second = SettingsStore(path)
        first.create("eur", 0.92)
        assert [s.currency_code for s in second.list()] == ["eur"]

        first.create("gbp", 0.79)

        assert [s.currency_code for s in second.list()] == ["eur", "gbp"]

    def test_enable_through_two_registries_keeps_one_setting_per_code(
        self, tmp_path: Path, provider, store_currencies
    ) -> None:
        """Test re-enabling via a second registry updates the existing setting."""
        path = str(tmp_path / "settings.json")
        api_registry = SettingRegistry(SettingsStore(path), provider, store_currencies)
        cli_registry = SettingRegistry(SettingsStore(path), provider, store_currencies)
        cli_registry.all_settings()

        created = api_registry.enable_currency("eur")
        re_enabled = cli_registry.enable_currency("eur")

        assert re_enabled.id == created.id
        assert len(SettingsStore(path).list()) == 1


class TestCatalogStore:
    """Tests for CatalogStore."""

    def test_missing_file_returns_empty(self, catalog: CatalogStore) -> None:
        """Test a missing catalog reads as empty."""
        assert catalog.read_variants() == []

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        """Test a corrupt catalog raises CatalogError."""
        path = tmp_path / "catalog.json"
        path.write_text("{not json")

        with pytest.raises(CatalogError):
            CatalogStore(str(path)).read_variants()

    def test_apply_replacements(self, catalog: CatalogStore) -> None:
        """Test price sets are replaced and new prices get ids."""
        catalog.save_variants([make_variant("v1", usd=100, eur=50), make_variant("v2", usd=10)])

        count = catalog.apply_price_replacements(
            [
                VariantPriceUpdate(
                    "v1",
                    [PriceRecord("usd", 100, "v1_usd"), PriceRecord("gbp", 79)],
                )
            ]
        )

        assert count == 1
        variants = {v.id: v for v in catalog.read_variants()}
        assert prices_by_code(variants["v1"].prices) == {"usd": 100, "gbp": 79}
        gbp = variants["v1"].find_price("gbp")
        assert gbp.id.startswith("price_")
        assert prices_by_code(variants["v2"].prices) == {"usd": 10}

    def test_unknown_variant_rejects_batch(self, catalog: CatalogStore) -> None:
        """Test a batch with an unknown variant writes nothing."""
        catalog.save_variants([make_variant("v1", usd=100)])

        with pytest.raises(CatalogError):
            catalog.apply_price_replacements(
                [
                    VariantPriceUpdate("v1", [PriceRecord("usd", 999)]),
                    VariantPriceUpdate("ghost", [PriceRecord("usd", 1)]),
                ]
            )

        assert prices_by_code(catalog.read_variants()[0].prices) == {"usd": 100}

    def test_empty_batch(self, catalog: CatalogStore) -> None:
        """Test an empty batch is a no-op."""
        assert catalog.apply_price_replacements([]) == 0


class TestStoreCurrencies:
    """Tests for StoreCurrencies."""

    def test_default_currency(self) -> None:
        """Test the flagged currency is the default, lowercased."""
        currencies = StoreCurrencies(
            [SupportedCurrencyConfig("EUR", False), SupportedCurrencyConfig("USD", True)]
        )

        assert currencies.get_default_currency() == "usd"
        assert currencies.supported_codes() == ["eur", "usd"]

    def test_no_default_raises(self) -> None:
        """Test a store without a default currency raises."""
        with pytest.raises(BaseCurrencyNotFoundError) as exc_info:
            StoreCurrencies([SupportedCurrencyConfig("usd")]).get_default_currency()

        assert exc_info.value.status_code == 409
