"""
Unified account transaction history.

An account's activity comes from two independently indexed sources:

- direct transactions whose from/to field is the account;
- transactions implied by Transfer logs whose from/to is the account
  (e.g. a token moved by an intermediary contract call the account never
  signed or received directly).

Both sources are scanned concurrently with the same direction filter,
order, and window (offset + limit + 1 rows, the extra row detecting that
more results exist without a count). Transfer-implied hashes missing from
the direct set are resolved against txs in batches, the union is keyed by
hash so a transaction matching both sources appears once, then sorted by
(block_num, hash) and sliced.

total is a lower bound, not a count: when more rows exist it is
next_offset + 1.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Collection

from backend_explorer.activity.normalize import to_rpc_transaction
from backend_explorer.core.exceptions import ValidationError
from backend_explorer.explorer_logging import get_logger
from backend_explorer.indexer.batch import DEFAULT_BATCH_SIZE, fetch_in_batches
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.models import TRANSFER_SIGNATURE, TX_COLUMNS, TransactionRow
from backend_explorer.indexer.query import DESC, DIRECTIONS, Condition, Scan
from backend_explorer.indexer.values import normalize_address

logger = get_logger(__name__)

MAX_LIMIT = 1_000
DEFAULT_LIMIT = 100

INCLUDE_ALL = "all"
INCLUDE_SENT = "sent"
INCLUDE_RECEIVED = "received"
INCLUDE_OPTIONS = (INCLUDE_ALL, INCLUDE_SENT, INCLUDE_RECEIVED)


@dataclass
class AccountTransactionsPage:
    """One page of an account's merged transaction history."""

    transactions: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    """Lower bound: next offset, plus one when has_more."""
    offset: int = 0
    """Offset of the next page."""
    limit: int = 0
    """Number of transactions returned."""
    has_more: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": self.transactions,
            "total": self.total,
            "offset": self.offset,
            "limit": self.limit,
            "hasMore": self.has_more,
            "error": self.error,
        }


def resolve_window(offset: int, limit: int) -> tuple[int, int]:
    """Clamp offset to >= 0 and limit to >= 1; reject limit above MAX_LIMIT."""
    offset = max(0, int(offset))
    limit = int(limit)
    if limit > MAX_LIMIT:
        raise ValidationError(f"Limit is too high (max {MAX_LIMIT})")
    if limit < 1:
        limit = 1
    return offset, limit


def participant_conditions(address: str, include: str) -> tuple[Condition, ...]:
    """OR-group selecting rows where the address is sender and/or recipient."""
    if include == INCLUDE_SENT:
        return (Condition("from", address),)
    if include == INCLUDE_RECEIVED:
        return (Condition("to", address),)
    return (Condition("from", address), Condition("to", address))


def _direct_scan(address: str, include: str, sort: str, chain_id: int, fetch_size: int) -> Scan:
    return (
        Scan.select_from("txs", *TX_COLUMNS)
        .where("chain", chain_id)
        .where_any(*participant_conditions(address, include))
        .order_by("block_num", sort)
        .order_by("hash", sort)
        .limit(fetch_size)
    )


def _transfer_hashes_scan(address: str, include: str, sort: str, chain_id: int, fetch_size: int) -> Scan:
    return (
        Scan.select_from("transfer", "tx_hash", "block_num", signatures=[TRANSFER_SIGNATURE])
        .distinct()
        .where("chain", chain_id)
        .where_any(*participant_conditions(address, include))
        .order_by("block_num", sort)
        .order_by("tx_hash", sort)
        .limit(fetch_size)
    )


async def fetch_transactions_by_hash(
    indexer: IndexerClient,
    hashes: list[str],
    *,
    chain_id: int,
    resolved: Collection[str] = (),
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[TransactionRow]:
    """Resolve transaction hashes to txs rows, batch_size hashes per scan."""

    async def fetch_chunk(chunk: list[str]) -> list[TransactionRow]:
        scan = (
            Scan.select_from("txs", *TX_COLUMNS)
            .where("chain", chain_id)
            .where_in("hash", chunk)
        )
        return [TransactionRow.from_row(r) for r in await indexer.execute(scan)]

    return await fetch_in_batches(
        hashes, fetch_chunk, batch_size=batch_size, resolved=resolved
    )


async def list_account_transactions(
    indexer: IndexerClient,
    address: str,
    *,
    chain_id: int,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    include: str = INCLUDE_ALL,
    sort: str = DESC,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> AccountTransactionsPage:
    """
    Return one page of the account's deduplicated transaction history.

    Args:
        indexer: Upstream scan interface.
        address: Account address (validated, lowercased).
        chain_id: Chain every scan is restricted to.
        offset: Rows to skip; negative values are clamped to 0.
        limit: Page size; values below 1 are clamped to 1, above 1000 rejected.
        include: "all", "sent" or "received".
        sort: "asc" or "desc" by (block number, hash).
        batch_size: Hashes per resolution scan for transfer-implied transactions.

    Raises:
        ValidationError: Bad address, include, sort, or limit. No upstream call is made.
        UpstreamError: Either scan or any resolution batch failed.
        DataIntegrityError: A returned transaction has no sender.
    """
    address = normalize_address(address)
    include = (include or "").lower()
    if include not in INCLUDE_OPTIONS:
        raise ValidationError(f"include must be one of {INCLUDE_OPTIONS}")
    sort = (sort or "").lower()
    if sort not in DIRECTIONS:
        raise ValidationError(f"sort must be one of {DIRECTIONS}")
    offset, limit = resolve_window(offset, limit)

    fetch_size = offset + limit + 1

    direct_rows, transfer_rows = await asyncio.gather(
        indexer.execute(_direct_scan(address, include, sort, chain_id, fetch_size)),
        indexer.execute(_transfer_hashes_scan(address, include, sort, chain_id, fetch_size)),
    )

    txs_by_hash: dict[str, TransactionRow] = {}
    for raw in direct_rows:
        row = TransactionRow.from_row(raw)
        txs_by_hash[row.hash] = row

    transfer_hashes = [str(r["tx_hash"]).lower() for r in transfer_rows if r.get("tx_hash")]
    resolved = await fetch_transactions_by_hash(
        indexer,
        transfer_hashes,
        chain_id=chain_id,
        resolved=txs_by_hash.keys(),
        batch_size=batch_size,
    )
    for row in resolved:
        txs_by_hash[row.hash] = row

    ordered = sorted(
        txs_by_hash.values(),
        key=lambda r: (r.block_num, r.hash),
        reverse=(sort == DESC),
    )
    has_more = len(ordered) > offset + limit
    page = ordered[offset : offset + limit]

    transactions = [to_rpc_transaction(row, chain_id) for row in page]
    next_offset = offset + len(transactions)

    logger.info(
        "account_transactions_merged",
        address=address,
        include=include,
        sort=sort,
        direct=len(direct_rows),
        transfer_hashes=len(transfer_hashes),
        transfer_resolved=len(resolved),
        returned=len(transactions),
        has_more=has_more,
    )

    return AccountTransactionsPage(
        transactions=transactions,
        total=next_offset + 1 if has_more else next_offset,
        offset=next_offset,
        limit=len(transactions),
        has_more=has_more,
    )
