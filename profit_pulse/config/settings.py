# profit_pulse/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    COINGECKO_BASE_URL: str
    HTTP_TIMEOUT_SECONDS: float
    RATE_LIMIT_INTERVAL_MS: int
    CATALOG_TTL_SECONDS: int
    PRICE_TTL_SECONDS: int
    CATALOG_LIMIT: int
    CATALOG_SERVE_STALE_ON_ERROR: bool
    INPUT_DEBOUNCE_MS: int
    LOG_LEVEL: str
    LOG_JSON: bool

    @property
    def rate_limit_interval_s(self) -> float:
        return self.RATE_LIMIT_INTERVAL_MS / 1000.0

    @property
    def input_debounce_s(self) -> float:
        return self.INPUT_DEBOUNCE_MS / 1000.0

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            COINGECKO_BASE_URL=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
            HTTP_TIMEOUT_SECONDS=parse_float(os.getenv("HTTP_TIMEOUT_SECONDS"), 10.0),
            RATE_LIMIT_INTERVAL_MS=parse_int(os.getenv("RATE_LIMIT_INTERVAL_MS"), 1000),
            CATALOG_TTL_SECONDS=parse_int(os.getenv("CATALOG_TTL_SECONDS"), 300),
            PRICE_TTL_SECONDS=parse_int(os.getenv("PRICE_TTL_SECONDS"), 30),
            CATALOG_LIMIT=parse_int(os.getenv("CATALOG_LIMIT"), 200),
            CATALOG_SERVE_STALE_ON_ERROR=parse_bool(os.getenv("CATALOG_SERVE_STALE_ON_ERROR"), False),
            INPUT_DEBOUNCE_MS=parse_int(os.getenv("INPUT_DEBOUNCE_MS"), 50),
            LOG_LEVEL=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            LOG_JSON=parse_bool(os.getenv("LOG_JSON"), False),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
