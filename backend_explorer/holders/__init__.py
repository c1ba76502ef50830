"""
Token holder views.

Ledger builder (full Transfer replay), TTL ledger cache keyed by
(chain_id, token), paginated holder lists with ownership percentages, and
the token Transfer log.
"""

from backend_explorer.holders.cache import LedgerCache, TtlPolicy
from backend_explorer.holders.ledger import (
    Holder,
    HolderLedger,
    build_ledger,
    rank_holders,
    replay_transfers,
)
from backend_explorer.holders.service import HoldersPage, list_holders, ownership_percentage
from backend_explorer.holders.transfers import TransfersPage, list_token_transfers

__all__ = [
    "Holder",
    "HolderLedger",
    "HoldersPage",
    "LedgerCache",
    "TransfersPage",
    "TtlPolicy",
    "build_ledger",
    "list_holders",
    "list_token_transfers",
    "ownership_percentage",
    "rank_holders",
    "replay_transfers",
]
