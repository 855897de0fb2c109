"""
Catalog storage module.

Stores product variants and their per-currency prices as a JSON file and
applies batched price replacements.
"""

import json
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Iterable, Optional

from currency_exchange.exceptions import CatalogError
from currency_exchange.models import PriceRecord, Variant, VariantPriceUpdate

logger = logging.getLogger(__name__)

# Default path for catalog file
DEFAULT_CATALOG_PATH = "data/catalog.json"


def generate_price_id() -> str:
    return f"price_{uuid.uuid4().hex}"


class CatalogStore:
    """
    File-backed catalog of variants and prices.

    ``apply_price_replacements`` is all-or-nothing per call: the batch is
    validated in memory first, then the file is replaced atomically.
    """

    def __init__(self, catalog_path: Optional[str] = None) -> None:
        self.catalog_path = Path(catalog_path or DEFAULT_CATALOG_PATH)
        self._lock = threading.Lock()

    def _load(self) -> list[Variant]:
        if not self.catalog_path.exists():
            logger.warning(f"Catalog file not found: {self.catalog_path}")
            return []

        try:
            with open(self.catalog_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise CatalogError(f"Failed to read catalog: {e}", path=str(self.catalog_path))

        try:
            return [Variant.from_dict(v) for v in data.get("variants", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid catalog entry: {e}", path=str(self.catalog_path))

    def _save(self, variants: list[Variant]) -> None:
        self.catalog_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.catalog_path.with_suffix(self.catalog_path.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"variants": [v.to_dict() for v in variants]}, f, indent=2)
        os.replace(tmp_path, self.catalog_path)

    def read_variants(self) -> list[Variant]:
        """Read every variant with its existing prices."""
        with self._lock:
            return self._load()

    def save_variants(self, variants: Iterable[Variant]) -> None:
        """Replace the whole catalog (seeding, imports)."""
        with self._lock:
            self._save(list(variants))

    def apply_price_replacements(self, updates: list[VariantPriceUpdate]) -> int:
        """
        Replace the price sets of the given variants.

        Prices without an id are inserted with a fresh id.

        Args:
            updates: Full replacement price sets, one per variant.

        Returns:
            int: Number of variants updated.

        Raises:
            CatalogError: If any update targets an unknown variant. No
                variant is modified in that case.
        """
        if not updates:
            return 0

        with self._lock:
            variants = self._load()
            by_id = {v.id: v for v in variants}

            unknown = [u.variant_id for u in updates if u.variant_id not in by_id]
            if unknown:
                raise CatalogError(f"Unknown variants in price batch: {', '.join(unknown)}")

            for update in updates:
                by_id[update.variant_id].prices = [
                    PriceRecord(
                        currency_code=p.currency_code,
                        amount=p.amount,
                        id=p.id or generate_price_id(),
                    )
                    for p in update.prices
                ]

            self._save(variants)

        logger.info(f"Applied price replacements to {len(updates)} variants")
        return len(updates)
