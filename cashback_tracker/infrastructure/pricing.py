"""Price resolution: persistent historical cache and in-process live price"""

import logging
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Optional

from cashback_tracker.config import settings
from cashback_tracker.domain.exceptions import LivePriceUnavailableError, PriceAPIError
from cashback_tracker.domain.models import LivePrice, LivePriceCache, PriceQuote
from cashback_tracker.infrastructure.clients.coingecko import PriceClient
from cashback_tracker.infrastructure.observability.metrics import (
    price_fetch_failures_counter,
    price_lookup_counter,
)
from cashback_tracker.infrastructure.storage.repositories import PriceCacheRepository

logger = logging.getLogger(__name__)


class HistoricalPriceResolver:
    """Daily prices served from prices.json, fetched and cached on a miss"""

    def __init__(
        self,
        cache: PriceCacheRepository,
        client: PriceClient,
        symbol: str | None = None,
        today: date | None = None,
    ):
        self.cache = cache
        self.client = client
        self.symbol = (symbol or settings.asset_symbol).upper()
        self.today = today or date.today()

    async def lookup(self, day: date) -> PriceQuote:
        """
        Cached price if present, otherwise fetch from the API and persist it.

        Raises:
            PriceAPIError: If the price is not cached and the API call fails
        """
        cached = self.cache.get(self.symbol, day)
        if cached is not None:
            price_lookup_counter.labels(kind="historical", source="cache").inc()
            return PriceQuote(symbol=self.symbol, date=day, price_usd=cached, source="cache")

        try:
            price = await self.client.get_historical_price(day)
        except PriceAPIError:
            price_fetch_failures_counter.labels(kind="historical").inc()
            raise

        self.cache.put(self.symbol, day, price)
        price_lookup_counter.labels(kind="historical", source="api").inc()
        return PriceQuote(symbol=self.symbol, date=day, price_usd=price, source="api")

    async def resolve(self, day: date) -> Optional[float]:
        """
        Price for the day, or None when it cannot be obtained.

        None means "exclude from price-dependent totals", never zero.
        """
        if day > self.today:
            logger.debug("No historical price for a future date", extra={"date": day.isoformat()})
            return None
        try:
            quote = await self.lookup(day)
        except PriceAPIError as e:
            logger.warning(
                "Historical price unavailable, skipping",
                extra={"symbol": self.symbol, "date": day.isoformat(), "error": str(e)},
            )
            return None
        return quote.price_usd

    async def resolve_many(self, days: Iterable[date]) -> Dict[date, Optional[float]]:
        """Resolve each distinct day once, sequentially"""
        prices: Dict[date, Optional[float]] = {}
        for day in days:
            if day not in prices:
                prices[day] = await self.resolve(day)
        return prices


class LivePriceService:
    """Current price with a freshness window over an explicit cache object"""

    def __init__(
        self,
        cache: LivePriceCache,
        client: PriceClient,
        ttl_seconds: float | None = None,
        symbol: str | None = None,
    ):
        self.cache = cache
        self.client = client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.live_price_ttl_seconds
        self.symbol = (symbol or settings.asset_symbol).upper()

    async def get(self, now: datetime | None = None) -> LivePrice:
        """
        Fresh cached value, else a new fetch, else the last value marked stale.

        Raises:
            LivePriceUnavailableError: If the fetch fails and nothing was ever cached
        """
        now = now or datetime.now(timezone.utc)

        if self.cache.is_fresh(now, self.ttl_seconds):
            price_lookup_counter.labels(kind="live", source="cache").inc()
            return LivePrice(
                symbol=self.symbol,
                price_usd=self.cache.value,
                as_of=self.cache.timestamp,
                stale=False,
                source="cache",
            )

        try:
            price = await self.client.get_current_price()
        except PriceAPIError as e:
            price_fetch_failures_counter.labels(kind="live").inc()
            if self.cache.value is None:
                raise LivePriceUnavailableError(f"Live price unavailable: {e}") from e
            logger.warning(
                "Live price fetch failed, serving stale value",
                extra={"symbol": self.symbol, "as_of": self.cache.timestamp.isoformat(), "error": str(e)},
            )
            price_lookup_counter.labels(kind="live", source="stale").inc()
            return LivePrice(
                symbol=self.symbol,
                price_usd=self.cache.value,
                as_of=self.cache.timestamp,
                stale=True,
                source="cache",
            )

        self.cache.value = price
        self.cache.timestamp = now
        price_lookup_counter.labels(kind="live", source="api").inc()
        return LivePrice(symbol=self.symbol, price_usd=price, as_of=now, stale=False, source="api")

    async def current_price_or_none(self, now: datetime | None = None) -> Optional[float]:
        """Live price (possibly stale) for valuations; None if never available"""
        try:
            return (await self.get(now)).price_usd
        except LivePriceUnavailableError as e:
            logger.warning("No live price for valuation", extra={"error": str(e)})
            return None
