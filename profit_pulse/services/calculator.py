from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from typing import Any

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class CalculationResult:
    tokens_owned: float
    final_value: float
    profit_loss: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate(investment: float, purchase_price: float, target_price: float) -> CalculationResult:
    """
    Tokens bought at `purchase_price` and what they are worth at `target_price`.

    A zero (or negative) purchase price buys zero tokens.
    """
    tokens_owned = investment / purchase_price if purchase_price > 0 else 0.0
    final_value = tokens_owned * target_price
    profit_loss = final_value - investment
    return CalculationResult(
        tokens_owned=tokens_owned,
        final_value=final_value,
        profit_loss=profit_loss,
    )


def parse_amount(value: Any) -> float:
    """
    Read a user-entered amount. Uses the leading numeric part of strings
    ("12.5 usd" -> 12.5); anything unreadable or non-finite reads as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    return number if math.isfinite(number) else 0.0
