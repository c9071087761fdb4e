"""Pydantic models for CoinGecko listing and price payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from profit_pulse.utils.time import iso_z, utcnow


class Coin(BaseModel):
    """One entry of the /coins/list payload."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    symbol: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "symbol": self.symbol, "name": self.name}


class PriceQuote(BaseModel):
    """Current USD price and 24h change for a single coin."""

    model_config = ConfigDict(frozen=True)

    coin_id: str
    price: float = Field(..., ge=0.0)
    change_24h: float = 0.0
    fetched_at: datetime = Field(default_factory=utcnow)

    @field_validator("change_24h", mode="before")
    @classmethod
    def default_change(cls, value: Any) -> Any:
        # CoinGecko omits or nulls the change for thinly traded coins
        return 0.0 if value is None else value

    def to_dict(self) -> dict[str, Any]:
        return {
            "coin_id": self.coin_id,
            "price": self.price,
            "change_24h": self.change_24h,
            "fetched_at": iso_z(self.fetched_at),
        }
