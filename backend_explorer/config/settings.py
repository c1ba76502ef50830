"""
Application settings.

Responsibilities:
- Load configuration from environment variables and the .env file.
- Validate numeric settings and provide defaults for optional ones.
- Expose typed settings (indexer endpoint, chain id, RPC URL, timeouts,
  ledger cache TTL) for the indexer client, services, and API server.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from backend_explorer.config.env import (
    env_bool,
    env_float,
    env_int,
    env_str,
    load_explorer_env,
)

DEFAULT_INDEXER_ENDPOINT = "https://api.indexsupply.net/v2/query"
DEFAULT_CHAIN_ID = 1
DEFAULT_UPSTREAM_TIMEOUT_SEC = 10.0
DEFAULT_HOLDERS_CACHE_TTL_SEC = 60.0
DEFAULT_FETCH_BATCH_SIZE = 500


@dataclass(frozen=True)
class Settings:
    """Typed view of the process environment."""

    indexer_endpoint: str = DEFAULT_INDEXER_ENDPOINT
    indexer_api_key: str = ""
    chain_id: int = DEFAULT_CHAIN_ID
    chain_rpc_url: str = ""
    upstream_timeout_sec: float = DEFAULT_UPSTREAM_TIMEOUT_SEC
    """Applied to every indexer and RPC HTTP call; the request fails fast after it."""
    holders_cache_ttl_sec: float = DEFAULT_HOLDERS_CACHE_TTL_SEC
    ledger_exclude_zero_address: bool = False
    fetch_batch_size: int = DEFAULT_FETCH_BATCH_SIZE

    @classmethod
    def from_env(cls) -> "Settings":
        load_explorer_env()
        settings = cls(
            indexer_endpoint=env_str("INDEXER_ENDPOINT", DEFAULT_INDEXER_ENDPOINT),
            indexer_api_key=env_str("INDEXER_API_KEY"),
            chain_id=env_int("CHAIN_ID", DEFAULT_CHAIN_ID),
            chain_rpc_url=env_str("CHAIN_RPC_URL"),
            upstream_timeout_sec=env_float("UPSTREAM_TIMEOUT_SEC", DEFAULT_UPSTREAM_TIMEOUT_SEC),
            holders_cache_ttl_sec=env_float("HOLDERS_CACHE_TTL_SEC", DEFAULT_HOLDERS_CACHE_TTL_SEC),
            ledger_exclude_zero_address=env_bool("LEDGER_EXCLUDE_ZERO_ADDRESS"),
            fetch_batch_size=env_int("FETCH_BATCH_SIZE", DEFAULT_FETCH_BATCH_SIZE),
        )
        if settings.upstream_timeout_sec <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SEC must be positive")
        if settings.holders_cache_ttl_sec < 0:
            raise ValueError("HOLDERS_CACHE_TTL_SEC must be non-negative")
        if settings.fetch_batch_size < 1:
            raise ValueError("FETCH_BATCH_SIZE must be at least 1")
        return settings

    @property
    def chain_cursor(self) -> str:
        """Indexer cursor covering the whole chain history."""
        return f"{self.chain_id}-0"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings; call get_settings.cache_clear() after changing env."""
    return Settings.from_env()
