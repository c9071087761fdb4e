from __future__ import annotations

import logging
import time
from typing import Callable

from profit_pulse.schemas.coin import PriceQuote
from profit_pulse.services.coingecko import PriceDataSource
from profit_pulse.utils.cache import TTLCache

logger = logging.getLogger("profit_pulse.price_cache")

PRICE_TTL_SECONDS = 30


class PriceCache:
    """Per-coin price quotes, refetched once they are older than the TTL."""

    def __init__(
        self,
        source: PriceDataSource,
        *,
        ttl_seconds: float = PRICE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self._cache: TTLCache[PriceQuote] = TTLCache(ttl_seconds, clock=clock)

    async def get_price(self, coin_id: str) -> PriceQuote:
        cached = self._cache.get(coin_id)
        if cached is not None:
            return cached

        # failures propagate and leave no entry behind
        quote = await self.source.fetch_price(coin_id)
        self._cache.set(coin_id, quote)
        logger.debug("price cached | coin=%s price=%s", coin_id, quote.price)
        return quote

    def peek(self, coin_id: str) -> PriceQuote | None:
        return self._cache.get(coin_id)

    def clear(self) -> None:
        self._cache.clear()
