from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from profit_pulse.config.settings import Settings, get_settings
from profit_pulse.services.catalog import CoinCatalog
from profit_pulse.services.coingecko import PriceDataSource
from profit_pulse.services.price_cache import PriceCache
from profit_pulse.services.rate_limiter import RateLimiter
from profit_pulse.services.selection import CoinSelector


@dataclass(frozen=True)
class Services:
    settings: Settings
    rate_limiter: RateLimiter
    source: PriceDataSource
    prices: PriceCache
    catalog: CoinCatalog
    selector: CoinSelector


def build_services(
    settings: Settings | None = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Services:
    """Wire one rate limiter, data source and pair of caches together."""
    settings = settings or get_settings()
    rate_limiter = RateLimiter(settings.rate_limit_interval_s)
    source = PriceDataSource(settings, rate_limiter=rate_limiter, client=client)
    prices = PriceCache(source, ttl_seconds=settings.PRICE_TTL_SECONDS)
    catalog = CoinCatalog(
        source,
        price_cache=prices,
        ttl_seconds=settings.CATALOG_TTL_SECONDS,
        limit=settings.CATALOG_LIMIT,
        serve_stale_on_error=settings.CATALOG_SERVE_STALE_ON_ERROR,
    )
    return Services(
        settings=settings,
        rate_limiter=rate_limiter,
        source=source,
        prices=prices,
        catalog=catalog,
        selector=CoinSelector(catalog, prices),
    )
