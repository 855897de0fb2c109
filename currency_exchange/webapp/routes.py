"""
FastAPI routes for the currency exchange admin API.

Handles:
- Listing and reading exchange settings
- Enabling a currency (auto mode, fresh provider rate)
- Updating status/mode/rate of a setting
- Triggering a price sync
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Query

from currency_exchange.models import ExchangeRateMode, ExchangeRateStatus
from currency_exchange.registry.setting_registry import SettingUpdateRequest
from currency_exchange.services.container import ServiceContainer, build_container
from currency_exchange.utils.config_loader import AppConfig, load_config, load_env
from currency_exchange.webapp.schemas import (
    CurrencyExchangeSettingEnvelope,
    CurrencyExchangeSettingList,
    CurrencyExchangeSettingResponse,
    EnableCurrencyRequest,
    ErrorResponse,
    SyncResponse,
    UpdateCurrencyExchangeSettingRequest,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Exchange setting not found"},
    409: {"model": ErrorResponse, "description": "Store has no default currency"},
    500: {"model": ErrorResponse, "description": "Settings or catalog storage failure"},
    502: {"model": ErrorResponse, "description": "Exchange rate provider failure"},
}

router = APIRouter(
    prefix="/admin/currency-exchange",
    tags=["currency-exchange"],
    responses=ERROR_RESPONSES,
)


# ============================================================================
# Dependency Injection
# ============================================================================

@lru_cache()
def get_app_config() -> AppConfig:
    """
    Get application config (cached).

    Clear cache with get_app_config.cache_clear() if config changes.
    """
    load_env()
    return load_config()


@lru_cache()
def get_container() -> ServiceContainer:
    """Get the wired services (cached). Override in tests."""
    return build_container(get_app_config())


# ============================================================================
# Routes
# ============================================================================

@router.get("", response_model=CurrencyExchangeSettingList)
def list_currency_exchange_settings(
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    currency_code: Optional[str] = Query(None, min_length=1, max_length=6),
    status: Optional[ExchangeRateStatus] = Query(None),
    mode: Optional[ExchangeRateMode] = Query(None),
    container: ServiceContainer = Depends(get_container),
) -> CurrencyExchangeSettingList:
    """List exchange settings with pagination and optional filters."""
    api_config = container.config.api
    limit = min(limit or api_config.default_limit, api_config.max_limit)
    settings, count = container.registry.list_settings(
        limit=limit,
        offset=offset,
        currency_code=currency_code,
        status=status,
        mode=mode,
    )
    return CurrencyExchangeSettingList(
        currency_exchange_settings=[
            CurrencyExchangeSettingResponse.from_setting(s) for s in settings
        ],
        count=count,
        limit=limit,
        offset=offset,
    )


@router.post("/enable", response_model=CurrencyExchangeSettingEnvelope)
def enable_currency_exchange_setting(
    body: EnableCurrencyRequest,
    container: ServiceContainer = Depends(get_container),
) -> CurrencyExchangeSettingEnvelope:
    """Enable a currency in auto mode with the current provider rate."""
    setting = container.registry.enable_currency(body.currency_code)
    return CurrencyExchangeSettingEnvelope(
        currency_exchange_setting=CurrencyExchangeSettingResponse.from_setting(setting)
    )


@router.post("/sync", response_model=SyncResponse)
def sync_prices(
    dry_run: bool = Query(False),
    container: ServiceContainer = Depends(get_container),
) -> SyncResponse:
    """Recompute variant prices for every enabled currency."""
    result = container.sync_service.run(dry_run=dry_run)
    return SyncResponse(**result.to_dict())


@router.get("/{setting_id}", response_model=CurrencyExchangeSettingEnvelope)
def get_currency_exchange_setting(
    setting_id: str,
    container: ServiceContainer = Depends(get_container),
) -> CurrencyExchangeSettingEnvelope:
    """Get one exchange setting."""
    setting = container.registry.get_setting(setting_id)
    return CurrencyExchangeSettingEnvelope(
        currency_exchange_setting=CurrencyExchangeSettingResponse.from_setting(setting)
    )


@router.post("/{setting_id}", response_model=CurrencyExchangeSettingEnvelope)
def update_currency_exchange_setting(
    setting_id: str,
    body: UpdateCurrencyExchangeSettingRequest,
    container: ServiceContainer = Depends(get_container),
) -> CurrencyExchangeSettingEnvelope:
    """Update status, mode and/or rate of an exchange setting."""
    request = SettingUpdateRequest(
        status=body.status,
        mode=body.mode,
        exchange_rate=body.exchange_rate,
    )
    setting = container.registry.update_setting(setting_id, request)
    return CurrencyExchangeSettingEnvelope(
        currency_exchange_setting=CurrencyExchangeSettingResponse.from_setting(setting)
    )
