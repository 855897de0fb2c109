"""
Exchange setting registry and transition rules.
"""

from currency_exchange.registry.setting_registry import (
    SettingRegistry,
    SettingUpdateRequest,
    plan_update,
)

__all__ = ["SettingRegistry", "SettingUpdateRequest", "plan_update"]
