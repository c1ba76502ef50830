"""
Time-bounded memoisation of holder ledgers keyed by (chain_id, token).

The store and the clock are injected; nothing is process-global. A fresh
entry (age below the TTL) is returned as is; a missing or stale one is
rebuilt by a full replay and written back in a single assignment. There is
no background refresh and no eviction.

Concurrent misses for the same key are not coalesced: each runs its own
replay and the last write wins. No lock is held while replaying.

A failed rebuild does not poison the cache: the stale entry is served (and
kept) when one exists, otherwise the error propagates.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, MutableMapping

from backend_explorer.core.exceptions import ExplorerError
from backend_explorer.explorer_logging import get_logger
from backend_explorer.holders.ledger import HolderLedger, build_ledger
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.values import normalize_address

logger = get_logger(__name__)

LedgerKey = tuple[int, str]

DEFAULT_MAX_AGE_SEC = 60.0


@dataclass(frozen=True)
class TtlPolicy:
    max_age_sec: float = DEFAULT_MAX_AGE_SEC

    def is_fresh(self, computed_at: float, now: float) -> bool:
        return now - computed_at < self.max_age_sec


class LedgerCache:
    def __init__(
        self,
        indexer: IndexerClient,
        *,
        policy: TtlPolicy | None = None,
        store: MutableMapping[LedgerKey, HolderLedger] | None = None,
        clock: Callable[[], float] = time.time,
        exclude_zero_address: bool = False,
    ) -> None:
        self._indexer = indexer
        self._policy = policy or TtlPolicy()
        self._store: MutableMapping[LedgerKey, HolderLedger] = {} if store is None else store
        self._clock = clock
        self._exclude_zero_address = exclude_zero_address

    async def get_ledger(self, token_address: str, chain_id: int) -> HolderLedger:
        token_address = normalize_address(token_address, "token")
        key: LedgerKey = (chain_id, token_address)
        cached = self._store.get(key)
        if cached is not None and self._policy.is_fresh(cached.computed_at, self._clock()):
            logger.debug("ledger_cache_hit", token=token_address, chain_id=chain_id)
            return cached

        logger.debug(
            "ledger_cache_miss",
            token=token_address,
            chain_id=chain_id,
            stale=cached is not None,
        )
        try:
            ledger = await build_ledger(
                self._indexer,
                token_address,
                chain_id,
                clock=self._clock,
                exclude_zero_address=self._exclude_zero_address,
            )
        except ExplorerError as e:
            if cached is None:
                raise
            logger.warning(
                "ledger_recompute_failed_serving_stale",
                token=token_address,
                chain_id=chain_id,
                age_sec=round(self._clock() - cached.computed_at, 3),
                error=e.message,
            )
            return cached

        self._store[key] = ledger
        return ledger

    def invalidate(self, token_address: str, chain_id: int) -> None:
        self._store.pop((chain_id, token_address.lower()), None)

    def clear(self) -> None:
        self._store.clear()
