"""
Token catalogue from TokenCreated factory events, newest first.

Page size is capped at 100. total follows the lower-bound convention used
by the other paginated views (one extra row fetched, no count query).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_explorer.holders.service import validate_page
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.models import TOKEN_CREATED_SIGNATURE
from backend_explorer.indexer.query import DESC, Scan
from backend_explorer.indexer.values import to_address_value, to_unix_seconds

MAX_LIMIT = 100


@dataclass
class TokensPage:
    tokens: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokens": self.tokens,
            "total": self.total,
            "offset": self.offset,
            "limit": self.limit,
        }


def _token_from_row(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": to_address_value(row.get("token")),
        "symbol": row.get("symbol") or "",
        "name": row.get("name") or "",
        "currency": row.get("currency") or "",
        "createdAt": to_unix_seconds(row.get("block_timestamp")),
    }


async def list_tokens(
    indexer: IndexerClient,
    *,
    chain_id: int,
    offset: int = 0,
    limit: int = 20,
) -> TokensPage:
    offset, limit = validate_page(offset, limit, max_limit=MAX_LIMIT)
    scan = (
        Scan.select_from(
            "tokencreated",
            "token",
            "symbol",
            "name",
            "currency",
            "block_timestamp",
            signatures=[TOKEN_CREATED_SIGNATURE],
        )
        .where("chain", chain_id)
        .order_by("block_timestamp", DESC)
        .limit(limit + 1)
        .offset(offset)
    )
    rows = await indexer.execute(scan)
    has_more = len(rows) > limit
    tokens = [_token_from_row(r) for r in rows[:limit]]
    return TokensPage(
        tokens=tokens,
        total=offset + len(tokens) + (1 if has_more else 0),
        offset=offset,
        limit=limit,
    )
