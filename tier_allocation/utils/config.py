"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    seed_path: Optional[Path]
    seed_elections: bool
    server_host: str
    server_port: int
    currency_symbol: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests call ``cache_clear``."""
    seed_path = os.getenv("TIER_ALLOCATION_SEED_PATH")
    return Settings(
        app_name=os.getenv("TIER_ALLOCATION_APP_NAME", "Tier Allocation Engine"),
        app_version=os.getenv("TIER_ALLOCATION_APP_VERSION", "0.1.0"),
        log_level=os.getenv("TIER_ALLOCATION_LOG_LEVEL", "INFO"),
        seed_path=Path(seed_path) if seed_path else None,
        seed_elections=_env_bool("TIER_ALLOCATION_SEED_ELECTIONS", True),
        server_host=os.getenv("TIER_ALLOCATION_HOST", "127.0.0.1"),
        server_port=int(os.getenv("TIER_ALLOCATION_PORT", "8000")),
        currency_symbol=os.getenv("TIER_ALLOCATION_CURRENCY_SYMBOL", "$"),
    )
