"""
Process-wide services container.

One indexer client, one RPC client, and one ledger cache per process,
built from Settings at startup and closed on shutdown. The ledger cache is
the only state shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_explorer.config import Settings
from backend_explorer.holders.cache import LedgerCache, TtlPolicy
from backend_explorer.indexer.client import IndexerClient, IndexSupplyClient
from backend_explorer.rpc.client import ChainRpcClient


@dataclass
class ExplorerServices:
    settings: Settings
    indexer: IndexerClient
    rpc: ChainRpcClient
    ledger_cache: LedgerCache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        indexer: IndexerClient | None = None,
        rpc: ChainRpcClient | None = None,
    ) -> "ExplorerServices":
        indexer = indexer or IndexSupplyClient.from_settings(settings)
        return cls(
            settings=settings,
            indexer=indexer,
            rpc=rpc or ChainRpcClient.from_settings(settings),
            ledger_cache=LedgerCache(
                indexer,
                policy=TtlPolicy(max_age_sec=settings.holders_cache_ttl_sec),
                exclude_zero_address=settings.ledger_exclude_zero_address,
            ),
        )

    async def aclose(self) -> None:
        await self.indexer.aclose()
        await self.rpc.aclose()
