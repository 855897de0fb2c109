"""
Catalog price exporter module.

Builds a variant × currency price matrix from the catalog and writes it
to Excel or CSV for review after a sync.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from currency_exchange.models import Variant

logger = logging.getLogger(__name__)

ID_COLUMNS = ["variant_id", "product_id"]


def build_price_matrix(
    variants: Iterable[Variant],
    base_currency: Optional[str] = None,
) -> pd.DataFrame:
    """
    Build a DataFrame with one row per variant and one column per currency.

    Amounts are integer minor units; a missing price is left empty.

    Args:
        variants: Catalog variants.
        base_currency: If given, its column is placed first.

    Returns:
        pd.DataFrame: Price matrix.
    """
    rows = []
    for variant in variants:
        row = {"variant_id": variant.id, "product_id": variant.product_id}
        for price in variant.prices:
            row[price.currency_code] = price.amount
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=ID_COLUMNS)

    df = pd.DataFrame(rows)
    currency_columns = sorted(c for c in df.columns if c not in ID_COLUMNS)
    if base_currency and base_currency in currency_columns:
        currency_columns.remove(base_currency)
        currency_columns.insert(0, base_currency)

    df = df[ID_COLUMNS + currency_columns]
    # Nullable integers keep amounts integral despite gaps
    for column in currency_columns:
        df[column] = df[column].astype("Int64")

    return df


def generate_filename(prefix: str = "variant_prices", extension: str = "xlsx") -> str:
    """Generate a timestamped filename for the export."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def write_price_matrix(
    df: pd.DataFrame,
    output_dir: Path,
    output_path: Optional[Path] = None,
    file_format: str = "xlsx",
) -> Path:
    """
    Write a price matrix to disk.

    Args:
        df: Price matrix from ``build_price_matrix``.
        output_dir: Directory used when ``output_path`` is not given.
        output_path: Explicit output file path.
        file_format: "xlsx" or "csv".

    Returns:
        Path: Path to the written file.

    Raises:
        ValueError: If the format is unsupported.
    """
    file_format = file_format.lower()
    if file_format not in ("xlsx", "csv"):
        raise ValueError(f"Unsupported export format: {file_format}")

    if output_path is None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / generate_filename(extension=file_format)
    else:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Exporting {len(df)} variants to: {output_path}")

    if file_format == "csv":
        df.to_csv(output_path, index=False)
    else:
        df.to_excel(output_path, index=False, sheet_name="Prices", engine="openpyxl")

    return output_path
