from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from profit_pulse.schemas.coin import Coin, PriceQuote
from profit_pulse.services.catalog import CoinCatalog
from profit_pulse.services.coingecko import DataUnavailableError
from profit_pulse.services.price_cache import PriceCache

logger = logging.getLogger("profit_pulse.selection")


class SelectionStatus(str, Enum):
    PRICED = "priced"
    UNPRICED = "unpriced"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class SelectionResult:
    status: SelectionStatus
    coin: Optional[Coin] = None
    quote: Optional[PriceQuote] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (SelectionStatus.PRICED, SelectionStatus.UNPRICED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "coin": self.coin.to_dict() if self.coin else None,
            "quote": self.quote.to_dict() if self.quote else None,
            "error": self.error,
        }


class CoinSelector:
    """
    Resolves a coin selection to (coin, quote).

    Price fetches are not cancelled when the user picks another coin; each
    selection takes a generation number and only the newest one may write
    `coin`/`quote`.
    """

    def __init__(self, catalog: CoinCatalog, prices: PriceCache):
        self.catalog = catalog
        self.prices = prices
        self.coin: Optional[Coin] = None
        self.quote: Optional[PriceQuote] = None
        self._generation = 0

    async def _find(self, coin_id: str) -> Optional[Coin]:
        # a coin already listed stays selectable while the list is stale
        coin = self.catalog.lookup(coin_id)
        if coin is None and not self.catalog.is_fresh():
            await self.catalog.refresh()
            coin = self.catalog.lookup(coin_id)
        return coin

    async def select(self, coin_id: str) -> SelectionResult:
        self._generation += 1
        generation = self._generation

        try:
            coin = await self._find(coin_id)
        except DataUnavailableError as exc:
            return SelectionResult(SelectionStatus.FAILED, error=exc.message)
        if coin is None:
            return SelectionResult(SelectionStatus.FAILED, error=f"Unknown coin '{coin_id}'")

        if generation != self._generation:
            return SelectionResult(SelectionStatus.SUPERSEDED, coin=coin)

        # selection completes even when no price can be fetched
        self.coin = coin
        self.quote = None

        try:
            quote = await self.prices.get_price(coin.id)
        except DataUnavailableError as exc:
            logger.warning("price unavailable | coin=%s", coin.id)
            if generation != self._generation:
                return SelectionResult(SelectionStatus.SUPERSEDED, coin=coin, error=exc.message)
            return SelectionResult(SelectionStatus.UNPRICED, coin=coin, error=exc.message)

        if generation != self._generation:
            logger.debug("discarding superseded quote | coin=%s", coin.id)
            return SelectionResult(SelectionStatus.SUPERSEDED, coin=coin, quote=quote)

        self.quote = quote
        return SelectionResult(SelectionStatus.PRICED, coin=coin, quote=quote)

    def clear(self) -> None:
        self._generation += 1
        self.coin = None
        self.quote = None
