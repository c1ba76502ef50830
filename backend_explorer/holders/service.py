"""
Paginated holder lists with ownership percentages.

Slices the cached ledger and annotates each holder with its share of total
supply, computed in integers and floor-truncated to two decimals so very
large balances never pass through float division. total is exact: the
whole ledger is in memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_explorer.core.exceptions import ValidationError
from backend_explorer.holders.cache import LedgerCache
from backend_explorer.indexer.values import normalize_address

MAX_LIMIT = 1_000


@dataclass
class HoldersPage:
    holders: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    total_supply: int = 0
    offset: int = 0
    """Offset of the next page."""
    limit: int = 0
    """Number of holders returned."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "holders": self.holders,
            "total": self.total,
            "totalSupply": str(self.total_supply),
            "offset": self.offset,
            "limit": self.limit,
        }


def ownership_percentage(balance: int, total_supply: int) -> float:
    """Share of supply in percent, floor-truncated to 2 decimals (1/3 -> 33.33)."""
    if total_supply <= 0:
        return 0.0
    return (balance * 10_000 // total_supply) / 100


def validate_page(offset: int, limit: int, max_limit: int = MAX_LIMIT) -> tuple[int, int]:
    if offset < 0:
        raise ValidationError("offset must be >= 0")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")
    return offset, limit


async def list_holders(
    cache: LedgerCache,
    token_address: str,
    *,
    chain_id: int,
    offset: int = 0,
    limit: int = 100,
) -> HoldersPage:
    token_address = normalize_address(token_address, "token")
    offset, limit = validate_page(offset, limit)

    ledger = await cache.get_ledger(token_address, chain_id)
    window = ledger.holders[offset : offset + limit]
    holders = [
        {
            "address": h.address,
            "balance": str(h.balance),
            "percentage": ownership_percentage(h.balance, ledger.total_supply),
        }
        for h in window
    ]
    return HoldersPage(
        holders=holders,
        total=len(ledger.holders),
        total_supply=ledger.total_supply,
        offset=offset + len(holders),
        limit=len(holders),
    )
