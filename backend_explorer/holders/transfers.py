"""
Paginated Transfer log of one token, newest first.

Optionally restricted to transfers touching one account. Like the account
transaction view, one row past the window is fetched to detect more
results; the indexer offers no count, so total is a lower bound.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_explorer.holders.service import validate_page
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.models import TRANSFER_SIGNATURE, TransferEvent
from backend_explorer.indexer.query import DESC, Condition, Scan
from backend_explorer.indexer.values import normalize_address


@dataclass
class TransfersPage:
    transfers: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int = 0
    has_more: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "transfers": self.transfers,
            "total": self.total,
            "offset": self.offset,
            "limit": self.limit,
            "hasMore": self.has_more,
        }


def _transfer_to_dict(ev: TransferEvent) -> dict[str, Any]:
    return {
        "from": ev.from_address,
        "to": ev.to_address,
        "value": str(ev.amount if ev.amount is not None else 0),
        "transactionHash": ev.tx_hash,
        "blockNumber": str(ev.block_num) if ev.block_num is not None else None,
        "logIndex": ev.log_idx,
        "timestamp": str(ev.timestamp) if ev.timestamp is not None else None,
    }


async def list_token_transfers(
    indexer: IndexerClient,
    token_address: str,
    *,
    chain_id: int,
    offset: int = 0,
    limit: int = 100,
    account: str | None = None,
) -> TransfersPage:
    token_address = normalize_address(token_address, "token")
    if account is not None:
        account = normalize_address(account, "account")
    offset, limit = validate_page(offset, limit)

    scan = (
        Scan.select_from(
            "transfer",
            "from",
            "to",
            "tokens",
            "tx_hash",
            "block_num",
            "log_idx",
            "block_timestamp",
            signatures=[TRANSFER_SIGNATURE],
        )
        .where("chain", chain_id)
        .where("address", token_address)
    )
    if account is not None:
        scan = scan.where_any(Condition("from", account), Condition("to", account))
    scan = (
        scan.order_by("block_num", DESC)
        .order_by("log_idx", DESC)
        .limit(limit + 1)
        .offset(offset)
    )

    rows = await indexer.execute(scan)
    has_more = len(rows) > limit
    transfers = [_transfer_to_dict(TransferEvent.from_row(r)) for r in rows[:limit]]
    next_offset = offset + len(transfers)
    return TransfersPage(
        transfers=transfers,
        total=next_offset + 1 if has_more else next_offset,
        offset=next_offset,
        limit=len(transfers),
        has_more=has_more,
    )
