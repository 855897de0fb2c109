"""
Exporter module.

Writes catalog price matrices to Excel/CSV.
"""

from currency_exchange.exporter.price_exporter import build_price_matrix, write_price_matrix

__all__ = ["build_price_matrix", "write_price_matrix"]
