"""
Utility modules.

Common helpers for logging and configuration loading.
"""

from currency_exchange.utils.config_loader import AppConfig, load_config, load_env
from currency_exchange.utils.logging_config import (
    LogContext,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "load_config",
    "load_env",
    "AppConfig",
    "setup_logging",
    "setup_logging_from_config",
    "LogContext",
]
