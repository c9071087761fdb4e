from __future__ import annotations

import asyncio

import pytest

from profit_pulse.schemas.coin import Coin, PriceQuote
from profit_pulse.services.catalog import (
    CATALOG_LIMIT,
    CoinCatalog,
    curate,
)
from profit_pulse.services.coingecko import COIN_LIST_ERROR, DataUnavailableError
from profit_pulse.services.price_cache import PriceCache

PRIORITY = ["bitcoin", "ethereum", "dogecoin", "tether", "solana"]


class _Clock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class _FakeSource:
    def __init__(self, coins: list[Coin]):
        self.coins = coins
        self.list_calls = 0
        self.price_calls = 0
        self.error: Exception | None = None

    async def fetch_coin_list(self) -> list[Coin]:
        self.list_calls += 1
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return list(self.coins)

    async def fetch_price(self, coin_id: str):
        self.price_calls += 1
        return PriceQuote(coin_id=coin_id, price=1.0)


def _coin(coin_id: str, name: str | None = None, symbol: str | None = None) -> Coin:
    return Coin(id=coin_id, symbol=symbol or coin_id[:4], name=name or coin_id.title())


def _listing(others: int = 30) -> list[Coin]:
    coins = [
        _coin("zeta-swap", "Zeta Swap", "zeta"),
        _coin("bitcoin", "Bitcoin", "btc"),
        _coin("alpha-finance", "Alpha Finance", "alpha"),
        _coin("ethereum", "Ethereum", "eth"),
        _coin("dogecoin", "Dogecoin", "doge"),
        _coin("spam-1", "X", "x"),
        _coin("spam-2", "N" * 50, "nnn"),
    ]
    coins.extend(_coin(f"token-{i:03d}", f"Token {i:03d}", f"tk{i}") for i in range(others))
    return coins


def _catalog(source: _FakeSource, clock: _Clock | None = None, **kwargs) -> CoinCatalog:
    return CoinCatalog(source, clock=clock or _Clock(), **kwargs)


def test_curate_puts_priority_first_and_sorts_each_group():
    coins = curate(_listing(others=3))
    ids = [c.id for c in coins]

    assert ids[:3] == ["bitcoin", "dogecoin", "ethereum"]
    assert ids[3:] == ["alpha-finance", "token-000", "token-001", "token-002", "zeta-swap"]


def test_curate_filters_bad_names_only_outside_priority():
    coins = curate(
        [
            _coin("bitcoin", "B"),
            _coin("one-char", "Q"),
            _coin("fifty", "F" * 50),
            _coin("forty-nine", "F" * 49),
            _coin("two", "Ok"),
        ]
    )
    assert [c.id for c in coins] == ["bitcoin", "forty-nine", "two"]


def test_curate_sort_is_case_insensitive():
    coins = curate([_coin("b", "beta"), _coin("a", "Alpha"), _coin("c", "Charlie")])
    assert [c.name for c in coins] == ["Alpha", "beta", "Charlie"]


def test_curate_sorts_accented_names_with_base_letter():
    coins = curate(
        [_coin("zeta", "Zeta"), _coin("esta", "\u00c9sta"), _coin("alpha", "Alpha"), _coin("ferro", "Ferro")],
        priority_ids=frozenset(),
    )
    assert [c.id for c in coins] == ["alpha", "esta", "ferro", "zeta"]


def test_curate_caps_length_and_keeps_priority():
    listing = _listing(others=400)
    coins = curate(listing)
    assert len(coins) == CATALOG_LIMIT
    assert {"bitcoin", "ethereum", "dogecoin"} <= {c.id for c in coins}


@pytest.mark.asyncio
async def test_refresh_snapshot_invariants():
    catalog = _catalog(_FakeSource(_listing(others=300)))
    snapshot = await catalog.refresh()

    assert len(snapshot) <= CATALOG_LIMIT
    flags = [c.id in PRIORITY for c in snapshot]
    # once a non-priority coin appears no priority coin follows
    assert flags == sorted(flags, reverse=True)

    priority = [c.name.casefold() for c in snapshot if c.id in PRIORITY]
    others = [c.name.casefold() for c in snapshot if c.id not in PRIORITY]
    assert priority == sorted(priority)
    assert others == sorted(others)


@pytest.mark.asyncio
async def test_refresh_within_ttl_reuses_snapshot():
    source = _FakeSource(_listing())
    clock = _Clock()
    catalog = _catalog(source, clock)

    first = await catalog.refresh()
    clock.now += 299
    second = await catalog.refresh()

    assert second is first
    assert source.list_calls == 1
    assert catalog.is_fresh()


@pytest.mark.asyncio
async def test_refresh_after_ttl_refetches_and_replaces():
    source = _FakeSource(_listing())
    clock = _Clock()
    catalog = _catalog(source, clock)

    first = await catalog.refresh()
    clock.now += 300
    assert not catalog.is_fresh()
    second = await catalog.refresh()

    assert second is not first
    assert catalog.snapshot is second
    assert source.list_calls == 2


@pytest.mark.asyncio
async def test_concurrent_refreshes_share_one_fetch():
    source = _FakeSource(_listing())
    catalog = _catalog(source)

    a, b, c = await asyncio.gather(catalog.refresh(), catalog.refresh(), catalog.refresh())

    assert a is b is c
    assert source.list_calls == 1


@pytest.mark.asyncio
async def test_failed_refresh_propagates_and_keeps_previous_snapshot():
    source = _FakeSource(_listing())
    clock = _Clock()
    catalog = _catalog(source, clock)
    previous = await catalog.refresh()

    clock.now += 301
    source.error = DataUnavailableError(COIN_LIST_ERROR)
    with pytest.raises(DataUnavailableError):
        await catalog.refresh()

    assert catalog.snapshot is previous
    assert catalog.search("bit")[0].id == "bitcoin"

    # next call retries the network
    source.error = None
    fresh = await catalog.refresh()
    assert fresh is not previous
    assert source.list_calls == 3


@pytest.mark.asyncio
async def test_failed_first_refresh_leaves_nothing_cached():
    source = _FakeSource(_listing())
    source.error = DataUnavailableError(COIN_LIST_ERROR)
    catalog = _catalog(source)

    with pytest.raises(DataUnavailableError):
        await catalog.refresh()
    assert catalog.snapshot is None
    assert catalog.search("") == []


@pytest.mark.asyncio
async def test_stale_snapshot_served_when_enabled():
    source = _FakeSource(_listing())
    clock = _Clock()
    catalog = _catalog(source, clock, serve_stale_on_error=True)
    previous = await catalog.refresh()

    clock.now += 600
    source.error = DataUnavailableError(COIN_LIST_ERROR)
    assert await catalog.refresh() is previous


@pytest.mark.asyncio
async def test_search_empty_query_returns_first_twenty():
    catalog = _catalog(_FakeSource(_listing(others=60)))
    snapshot = await catalog.refresh()

    assert catalog.search("") == list(snapshot.coins[:20])
    assert catalog.search(None) == list(snapshot.coins[:20])


@pytest.mark.asyncio
async def test_search_matches_symbol_name_and_id_case_insensitively():
    catalog = _catalog(_FakeSource(_listing()))
    await catalog.refresh()

    assert [c.id for c in catalog.search("BTC")] == ["bitcoin"]
    assert [c.id for c in catalog.search("dogeCOIN")] == ["dogecoin"]
    assert [c.id for c in catalog.search("alpha-fin")] == ["alpha-finance"]
    assert catalog.search("no-such-coin") == []


@pytest.mark.asyncio
async def test_search_caps_results_and_preserves_order():
    catalog = _catalog(_FakeSource(_listing(others=150)))
    snapshot = await catalog.refresh()

    hits = catalog.search("token")
    assert len(hits) == 50
    for coin in hits:
        term = "token"
        assert term in coin.symbol.lower() or term in coin.name.lower() or term in coin.id.lower()
    positions = [snapshot.coins.index(c) for c in hits]
    assert positions == sorted(positions)


@pytest.mark.asyncio
async def test_search_never_fetches():
    source = _FakeSource(_listing())
    clock = _Clock()
    catalog = _catalog(source, clock)
    await catalog.refresh()
    clock.now += 1_000

    catalog.search("bit")
    catalog.lookup("bitcoin")
    assert source.list_calls == 1


@pytest.mark.asyncio
async def test_lookup_exact_id():
    catalog = _catalog(_FakeSource(_listing()))
    assert catalog.lookup("bitcoin") is None
    await catalog.refresh()

    assert catalog.lookup("bitcoin").name == "Bitcoin"
    assert catalog.lookup("bit") is None
    assert catalog.lookup("spam-1") is None


@pytest.mark.asyncio
async def test_invalidate_clears_catalog_and_price_caches():
    source = _FakeSource(_listing())
    prices = PriceCache(source, clock=_Clock())
    catalog = _catalog(source, price_cache=prices)

    await catalog.refresh()
    await prices.get_price("bitcoin")
    assert prices.peek("bitcoin") is not None

    catalog.invalidate()

    assert not catalog.is_fresh()
    assert prices.peek("bitcoin") is None
    await catalog.refresh()
    await prices.get_price("bitcoin")
    assert source.list_calls == 2
    assert source.price_calls == 2
