"""
Multi-currency price sync: exchange settings, rate merging and price derivation.
"""

__version__ = "1.0.0"
