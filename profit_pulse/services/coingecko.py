"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
from pydantic import ValidationError

from profit_pulse.config.settings import Settings, get_settings
from profit_pulse.schemas.coin import Coin, PriceQuote
from profit_pulse.services.rate_limiter import RateLimiter

logger = logging.getLogger("profit_pulse.coingecko")

COIN_LIST_PATH = "/coins/list"
SIMPLE_PRICE_PATH = "/simple/price"

COIN_LIST_ERROR = "Failed to load cryptocurrency list. Please check your internet connection."
PRICE_ERROR = "Failed to load coin price. Please try again."


class DataUnavailableError(RuntimeError):
    """Remote data could not be fetched; `message` is safe to show to users."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CoinNotFoundError(DataUnavailableError):
    def __init__(self, coin_id: str, message: str = PRICE_ERROR):
        super().__init__(message)
        self.coin_id = coin_id


class PriceDataSource:
    """
    Rate-limited access to the CoinGecko listing and simple-price endpoints.

    Every request goes through the shared RateLimiter, so at most one call is
    in flight and consecutive calls start at least one interval apart.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.COINGECKO_BASE_URL
        self.rate_limiter = rate_limiter or RateLimiter(self.settings.rate_limit_interval_s)
        self._shared_client = client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._shared_client is not None:
            yield self._shared_client
            return
        async with httpx.AsyncClient(timeout=self.settings.HTTP_TIMEOUT_SECONDS) as c:
            yield c

    async def _get_json(self, path: str, params: dict[str, Any] | None, error_message: str) -> Any:
        url = f"{self.base_url}{path}"
        async with self.rate_limiter.slot():
            try:
                async with self._client() as client:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
            except httpx.HTTPStatusError as exc:
                logger.warning("coingecko %s failed | status=%s", path, exc.response.status_code)
                raise DataUnavailableError(error_message) from exc
            except httpx.HTTPError as exc:
                logger.warning("coingecko %s failed | err=%r", path, exc)
                raise DataUnavailableError(error_message) from exc
            except ValueError as exc:
                logger.warning("coingecko %s returned invalid JSON", path)
                raise DataUnavailableError(error_message) from exc

    async def fetch_coin_list(self) -> list[Coin]:
        """Return every listed coin in the order the API sent them."""

        data = await self._get_json(COIN_LIST_PATH, None, COIN_LIST_ERROR)
        if not isinstance(data, list):
            logger.warning("coingecko %s returned %s, expected list", COIN_LIST_PATH, type(data).__name__)
            raise DataUnavailableError(COIN_LIST_ERROR)

        coins: list[Coin] = []
        skipped = 0
        for raw in data:
            try:
                coins.append(Coin.model_validate(raw))
            except ValidationError:
                skipped += 1

        if skipped:
            logger.info("coin list | skipped %d malformed entries", skipped)
        logger.debug("coin list | fetched=%d", len(coins))
        return coins

    async def fetch_price(self, coin_id: str) -> PriceQuote:
        """Return the current USD price and 24h change for one coin."""

        params = {
            "ids": coin_id,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }
        data = await self._get_json(SIMPLE_PRICE_PATH, params, PRICE_ERROR)

        entry = data.get(coin_id) if isinstance(data, dict) else None
        if not isinstance(entry, dict) or entry.get("usd") is None:
            logger.warning("coingecko price missing | coin=%s", coin_id)
            raise CoinNotFoundError(coin_id)

        try:
            return PriceQuote(
                coin_id=coin_id,
                price=entry["usd"],
                change_24h=entry.get("usd_24h_change"),
            )
        except ValidationError as exc:
            logger.warning("coingecko price malformed | coin=%s", coin_id)
            raise DataUnavailableError(PRICE_ERROR) from exc
