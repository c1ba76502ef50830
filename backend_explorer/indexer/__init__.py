"""
Upstream indexer access.

Filtered-scan query model, the IndexerClient interface and its HTTP
implementation, typed rows, cell coercion helpers, and the batched row
fetcher used to resolve identifiers in size-bounded chunks.
"""

from backend_explorer.indexer.batch import fetch_in_batches
from backend_explorer.indexer.blocks import fetch_latest_block
from backend_explorer.indexer.client import IndexerClient, IndexSupplyClient
from backend_explorer.indexer.models import (
    TOKEN_CREATED_SIGNATURE,
    TRANSFER_SIGNATURE,
    TransactionRow,
    TransferEvent,
)
from backend_explorer.indexer.query import ASC, DESC, Condition, Scan, render_sql

__all__ = [
    "ASC",
    "DESC",
    "Condition",
    "IndexSupplyClient",
    "IndexerClient",
    "Scan",
    "TOKEN_CREATED_SIGNATURE",
    "TRANSFER_SIGNATURE",
    "TransactionRow",
    "TransferEvent",
    "fetch_in_batches",
    "fetch_latest_block",
    "render_sql",
]
