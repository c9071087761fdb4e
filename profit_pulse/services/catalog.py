"""
Curated, cached view of the CoinGecko coin list.

A refresh partitions the raw listing into priority coins (see
config/priority_coins.py) and everything else, sorts each group by name,
puts the priority group first and caps the result. Snapshots are immutable
and replaced wholesale.
"""
from __future__ import annotations

import asyncio
import logging
import time
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Iterator, Optional

from profit_pulse.config.priority_coins import PRIORITY_COIN_IDS
from profit_pulse.schemas.coin import Coin
from profit_pulse.services.coingecko import DataUnavailableError, PriceDataSource
from profit_pulse.services.price_cache import PriceCache
from profit_pulse.utils.cache import TTLCache
from profit_pulse.utils.time import utcnow

logger = logging.getLogger("profit_pulse.catalog")

CATALOG_TTL_SECONDS = 300
CATALOG_LIMIT = 200
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50  # exclusive
DEFAULT_RESULTS = 20
MAX_SEARCH_RESULTS = 50

_SNAPSHOT_KEY = "coin_list"


@dataclass(frozen=True)
class CatalogSnapshot:
    coins: tuple[Coin, ...]
    created_at: datetime = field(default_factory=utcnow)

    def __len__(self) -> int:
        return len(self.coins)

    def __iter__(self) -> Iterator[Coin]:
        return iter(self.coins)


def _collation_key(name: str) -> str:
    # accented letters sort with their base letter
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _name_key(coin: Coin) -> tuple[str, str, str, str]:
    return (_collation_key(coin.name), coin.name.casefold(), coin.name, coin.id)


def _has_sane_name(coin: Coin) -> bool:
    return MIN_NAME_LENGTH <= len(coin.name) < MAX_NAME_LENGTH


def curate(
    coins: Iterable[Coin],
    *,
    priority_ids: frozenset[str] = PRIORITY_COIN_IDS,
    limit: int = CATALOG_LIMIT,
) -> tuple[Coin, ...]:
    priority: list[Coin] = []
    others: list[Coin] = []
    for coin in coins:
        if coin.id in priority_ids:
            priority.append(coin)
        elif _has_sane_name(coin):
            others.append(coin)

    priority.sort(key=_name_key)
    others.sort(key=_name_key)
    return tuple((priority + others)[:limit])


def _matches(coin: Coin, term: str) -> bool:
    return term in coin.symbol.lower() or term in coin.name.lower() or term in coin.id.lower()


class CoinCatalog:
    def __init__(
        self,
        source: PriceDataSource,
        *,
        price_cache: Optional[PriceCache] = None,
        ttl_seconds: float = CATALOG_TTL_SECONDS,
        limit: int = CATALOG_LIMIT,
        serve_stale_on_error: bool = False,
        priority_ids: frozenset[str] = PRIORITY_COIN_IDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.price_cache = price_cache
        self.limit = limit
        self.serve_stale_on_error = serve_stale_on_error
        self.priority_ids = priority_ids
        self._cache: TTLCache[CatalogSnapshot] = TTLCache(ttl_seconds, clock=clock)
        self._snapshot: Optional[CatalogSnapshot] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> Optional[CatalogSnapshot]:
        """Most recent snapshot, fresh or not."""
        return self._snapshot

    def is_fresh(self) -> bool:
        return _SNAPSHOT_KEY in self._cache

    async def refresh(self) -> CatalogSnapshot:
        cached = self._cache.get(_SNAPSHOT_KEY)
        if cached is not None:
            return cached

        # concurrent callers share one fetch
        async with self._refresh_lock:
            cached = self._cache.get(_SNAPSHOT_KEY)
            if cached is not None:
                return cached

            try:
                raw = await self.source.fetch_coin_list()
            except DataUnavailableError:
                if self.serve_stale_on_error and self._snapshot is not None:
                    logger.warning(
                        "catalog refresh failed | serving stale snapshot from %s",
                        self._snapshot.created_at.isoformat(),
                    )
                    return self._snapshot
                raise

            snapshot = CatalogSnapshot(
                coins=curate(raw, priority_ids=self.priority_ids, limit=self.limit),
            )
            self._cache.set(_SNAPSHOT_KEY, snapshot)
            self._snapshot = snapshot
            logger.info("catalog refreshed | source=%d kept=%d", len(raw), len(snapshot))
            return snapshot

    def search(self, query: str | None) -> list[Coin]:
        """Substring search over the current snapshot; never touches the network."""
        coins = self._snapshot.coins if self._snapshot is not None else ()

        term = (query or "").lower()
        if not term:
            return list(coins[:DEFAULT_RESULTS])

        hits: list[Coin] = []
        for coin in coins:
            if _matches(coin, term):
                hits.append(coin)
                if len(hits) == MAX_SEARCH_RESULTS:
                    break
        return hits

    def lookup(self, coin_id: str) -> Optional[Coin]:
        if self._snapshot is None:
            return None
        for coin in self._snapshot.coins:
            if coin.id == coin_id:
                return coin
        return None

    def invalidate(self) -> None:
        self._cache.clear()
        if self.price_cache is not None:
            self.price_cache.clear()
        logger.info("catalog and price caches cleared")
