"""Dependency injection for FastAPI endpoints"""

from datetime import date
from pathlib import Path

from fastapi import Depends, Request

from cashback_tracker.config import settings
from cashback_tracker.domain.models import LivePriceCache
from cashback_tracker.infrastructure.clients.coingecko import PriceClient
from cashback_tracker.infrastructure.pricing import HistoricalPriceResolver, LivePriceService
from cashback_tracker.infrastructure.storage.repositories import (
    CategoryRepository,
    PriceCacheRepository,
    SettingsRepository,
    TransactionRepository,
)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_data_dir() -> Path:
    """Directory holding the JSON data files"""
    return Path(settings.data_dir)


def get_today() -> date:
    """Calendar date used for period defaults and staking accrual"""
    return date.today()


def get_transaction_repo(data_dir: Path = Depends(get_data_dir)) -> TransactionRepository:
    return TransactionRepository(data_dir)


def get_settings_repo(data_dir: Path = Depends(get_data_dir)) -> SettingsRepository:
    return SettingsRepository(data_dir)


def get_category_repo(data_dir: Path = Depends(get_data_dir)) -> CategoryRepository:
    return CategoryRepository(data_dir)


def get_price_client() -> PriceClient:
    """Provide price API client instance"""
    return PriceClient()


def get_price_resolver(
    data_dir: Path = Depends(get_data_dir),
    client: PriceClient = Depends(get_price_client),
    today: date = Depends(get_today),
) -> HistoricalPriceResolver:
    return HistoricalPriceResolver(PriceCacheRepository(data_dir), client, today=today)


def get_live_price_cache(request: Request) -> LivePriceCache:
    """Process-wide live price cache owned by the application"""
    return request.app.state.live_price_cache


def get_live_price_service(
    cache: LivePriceCache = Depends(get_live_price_cache),
    client: PriceClient = Depends(get_price_client),
) -> LivePriceService:
    return LivePriceService(cache, client)
