from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from profit_pulse.schemas.coin import Coin
from profit_pulse.services.calculator import CalculationResult, calculate, parse_amount
from profit_pulse.services.coalesce import LatestWins
from profit_pulse.services.selection import CoinSelector, SelectionResult, SelectionStatus

logger = logging.getLogger("profit_pulse.session")

EXAMPLE_COIN_ID = "bitcoin"
EXAMPLE_INVESTMENT = 10_000.0
EXAMPLE_PURCHASE_PRICE = 50_000.0
EXAMPLE_TARGET_PRICE = 100_000.0

_INPUT_FIELDS = ("investment", "purchase_price", "target_price")


@dataclass
class CalculatorInputs:
    investment: float = 0.0
    purchase_price: float = 0.0
    target_price: float = 0.0


class CalculatorSession:
    """
    State behind one calculator screen: the three inputs, the selected coin
    and the last result. Input changes are coalesced so a burst of edits
    triggers a single recalculation.
    """

    def __init__(self, selector: CoinSelector, *, debounce_s: float = 0.05):
        self.selector = selector
        self.inputs = CalculatorInputs()
        self.coin: Optional[Coin] = None
        self.result: CalculationResult = self.calculate()
        self._recalc: LatestWins[CalculationResult] = LatestWins(debounce_s)

    def calculate(self) -> CalculationResult:
        self.result = calculate(
            self.inputs.investment,
            self.inputs.purchase_price,
            self.inputs.target_price,
        )
        return self.result

    def update(self, **fields: Any) -> asyncio.Task[CalculationResult]:
        """Apply input changes and schedule a recalculation."""
        unknown = set(fields) - set(_INPUT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown calculator input(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self.inputs, name, parse_amount(value))
        return self._recalc.submit(self.calculate)

    async def settle(self) -> CalculationResult:
        """Wait for any scheduled recalculation and return the current result."""
        await self._recalc.wait()
        return self.result

    async def select_coin(self, coin_id: str) -> SelectionResult:
        outcome = await self.selector.select(coin_id)
        if outcome.status is SelectionStatus.SUPERSEDED:
            return outcome

        if outcome.ok:
            self.coin = outcome.coin
        if outcome.quote is not None and outcome.quote.price:
            self.inputs.purchase_price = outcome.quote.price

        self.calculate()
        return outcome

    def reset(self) -> CalculationResult:
        self._recalc.cancel()
        self.selector.clear()
        self.coin = None
        self.inputs = CalculatorInputs()
        return self.calculate()

    async def load_example(self) -> CalculationResult:
        """Bitcoin at its live price, or at 50k when the price cannot be fetched."""
        outcome = await self.select_coin(EXAMPLE_COIN_ID)
        if outcome.status is SelectionStatus.SUPERSEDED:
            return self.result

        self.inputs.investment = EXAMPLE_INVESTMENT
        self.inputs.target_price = EXAMPLE_TARGET_PRICE
        if outcome.status is not SelectionStatus.PRICED:
            logger.warning("example price unavailable | status=%s", outcome.status.value)
            self.inputs.purchase_price = EXAMPLE_PURCHASE_PRICE
        return self.calculate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "coin": self.coin.to_dict() if self.coin else None,
            "inputs": {
                "investment": self.inputs.investment,
                "purchase_price": self.inputs.purchase_price,
                "target_price": self.inputs.target_price,
            },
            "result": self.result.to_dict(),
        }
