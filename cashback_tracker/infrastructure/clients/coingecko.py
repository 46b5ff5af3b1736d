"""CoinGecko HTTP client for historical and current asset prices"""

import httpx
from datetime import date
from cashback_tracker.domain.exceptions import PriceAPIError
from cashback_tracker.config import settings


class PriceClient:
    """Client for the external CoinGecko price API"""

    def __init__(
        self,
        base_url: str | None = None,
        coin_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.price_api_base
        self.coin_id = coin_id or settings.price_coin_id
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get_json(self, path: str, params: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise PriceAPIError(f"Price API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PriceAPIError(f"Price API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PriceAPIError(f"Price API unreachable: {e}") from e
            except ValueError as e:
                raise PriceAPIError(f"Invalid JSON from price API: {e}") from e

    @staticmethod
    def _as_price(value) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise PriceAPIError(f"Invalid price data from API: {value!r}")
        return float(value)

    async def get_historical_price(self, day: date) -> float:
        """
        Fetch the USD price for a past calendar day.

        CoinGecko expects the date as DD-MM-YYYY.

        Raises:
            PriceAPIError: On timeout, HTTP errors, or missing price data
        """
        data = await self._get_json(
            f"/coins/{self.coin_id}/history",
            {"date": day.strftime("%d-%m-%Y"), "localization": "false"},
        )
        try:
            return self._as_price(data["market_data"]["current_price"]["usd"])
        except (KeyError, TypeError) as e:
            raise PriceAPIError(f"No price data for {day.isoformat()}") from e

    async def get_current_price(self) -> float:
        """
        Fetch the current USD price.

        Raises:
            PriceAPIError: On timeout, HTTP errors, or missing price data
        """
        data = await self._get_json(
            "/simple/price",
            {"ids": self.coin_id, "vs_currencies": "usd"},
        )
        try:
            return self._as_price(data[self.coin_id]["usd"])
        except (KeyError, TypeError) as e:
            raise PriceAPIError("No current price in API response") from e
