"""
Services layer for the currency exchange sync.

Contains the sync orchestration and service wiring.
"""

from currency_exchange.services.container import ServiceContainer, build_container
from currency_exchange.services.sync_service import PriceSyncService, SyncResult

__all__ = ["PriceSyncService", "SyncResult", "ServiceContainer", "build_container"]
