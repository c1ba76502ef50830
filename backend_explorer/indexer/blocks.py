"""Latest indexed block height."""

from __future__ import annotations

from backend_explorer.core.exceptions import UpstreamError
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.query import DESC, Scan
from backend_explorer.indexer.values import to_int


async def fetch_latest_block(indexer: IndexerClient, chain_id: int) -> int:
    scan = (
        Scan.select_from("blocks", "num")
        .where("chain", chain_id)
        .order_by("num", DESC)
        .limit(1)
    )
    rows = await indexer.execute(scan)
    if not rows:
        raise UpstreamError("Indexer has no blocks for this chain")
    return to_int(rows[0].get("num"))
