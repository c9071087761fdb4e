# profit_pulse/scripts/cli.py
from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any, Optional, Sequence

from profit_pulse.config.logging_config import configure_logging
from profit_pulse.config.settings import get_settings
from profit_pulse.services.calculator import calculate, parse_amount
from profit_pulse.services.coingecko import DataUnavailableError
from profit_pulse.services.session import CalculatorSession
from profit_pulse.services.wiring import Services, build_services
from profit_pulse.utils.time import iso_z


async def _search(services: Services, args: argparse.Namespace) -> tuple[int, Any]:
    snapshot = await services.catalog.refresh()
    coins = services.catalog.search(args.query)
    return 0, {
        "query": args.query,
        "catalog_size": len(snapshot),
        "catalog_created_at": iso_z(snapshot.created_at),
        "results": [c.to_dict() for c in coins],
    }


async def _coin(services: Services, args: argparse.Namespace) -> tuple[int, Any]:
    await services.catalog.refresh()
    coin = services.catalog.lookup(args.coin_id)
    if coin is None:
        return 1, {"error": f"Unknown coin '{args.coin_id}'"}
    return 0, coin.to_dict()


async def _price(services: Services, args: argparse.Namespace) -> tuple[int, Any]:
    quote = await services.prices.get_price(args.coin_id)
    return 0, quote.to_dict()


async def _select(services: Services, args: argparse.Namespace) -> tuple[int, Any]:
    session = CalculatorSession(services.selector, debounce_s=services.settings.input_debounce_s)
    session.update(investment=args.investment, target_price=args.target_price)
    await session.settle()
    outcome = await session.select_coin(args.coin_id)
    return (0 if outcome.ok else 1), {"selection": outcome.to_dict(), **session.to_dict()}


async def _example(services: Services, args: argparse.Namespace) -> tuple[int, Any]:
    session = CalculatorSession(services.selector, debounce_s=services.settings.input_debounce_s)
    await session.load_example()
    return 0, session.to_dict()


_COMMANDS = {
    "search": _search,
    "coin": _coin,
    "price": _price,
    "select": _select,
    "example": _example,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="profit-pulse", description="Crypto profit/loss calculator")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Search the coin catalog")
    p.add_argument("query", nargs="?", default="")

    p = sub.add_parser("coin", help="Look up one coin by CoinGecko id")
    p.add_argument("coin_id")

    p = sub.add_parser("price", help="Current USD price of a coin")
    p.add_argument("coin_id")

    p = sub.add_parser("calc", help="Profit/loss for given prices (offline)")
    p.add_argument("--investment", required=True)
    p.add_argument("--purchase-price", required=True)
    p.add_argument("--target-price", required=True)

    p = sub.add_parser("select", help="Select a coin and use its live price as purchase price")
    p.add_argument("coin_id")
    p.add_argument("--investment", default="0")
    p.add_argument("--target-price", default="0")

    sub.add_parser("example", help="Bitcoin example: 10k invested, 100k target")
    return parser


async def run(args: argparse.Namespace, services: Optional[Services] = None) -> tuple[int, Any]:
    services = services or build_services(get_settings())
    try:
        return await _COMMANDS[args.command](services, args)
    except DataUnavailableError as exc:
        return 1, {"error": exc.message}


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.command == "calc":
        result = calculate(
            parse_amount(args.investment),
            parse_amount(args.purchase_price),
            parse_amount(args.target_price),
        )
        print(json.dumps(result.to_dict()))
        raise SystemExit(0)

    code, payload = asyncio.run(run(args))
    print(json.dumps(payload))
    raise SystemExit(code)


if __name__ == "__main__":
    main()
