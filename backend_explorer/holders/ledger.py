"""
Token holder ledger built by replaying a token's full Transfer history.

Every recomputation scans all Transfer events of the token (no time or row
bound) and accumulates a signed balance per address:

- the sender is debited unless it is the zero address (mint);
- the recipient is always credited, the zero address included, so burns
  accumulate a "balance" on the burn sink. Callers that do not want the
  sink in holder lists set exclude_zero_address.

Holders are the positive balances, sorted by balance descending and then
by address ascending so equal balances have a stable order. total_supply is
the sum of the positive balances. There is no incremental path: O(events)
time and O(addresses) memory on every rebuild.

A Transfer row missing a participant is malformed upstream data: the rebuild
fails with DataIntegrityError rather than crediting a placeholder address.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from backend_explorer.explorer_logging import get_logger
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.models import TRANSFER_SIGNATURE, TransferEvent
from backend_explorer.indexer.query import Scan
from backend_explorer.indexer.values import ZERO_ADDRESS, normalize_address

logger = get_logger(__name__)


@dataclass(frozen=True)
class Holder:
    address: str
    balance: int


@dataclass(frozen=True)
class HolderLedger:
    """Replayed balances of one token. Replaced wholesale on recomputation, never patched."""

    token_address: str
    chain_id: int
    holders: tuple[Holder, ...]
    """Positive balances, balance desc then address asc."""
    total_supply: int
    """Sum of holder balances."""
    computed_at: float
    """Clock reading (seconds) when the replay finished."""
    event_count: int = field(default=0, compare=False)

    @property
    def balances(self) -> dict[str, int]:
        return {h.address: h.balance for h in self.holders}


def replay_transfers(events: Iterable[TransferEvent]) -> dict[str, int]:
    """Signed balance per address from Transfer events. Pure function of its input."""
    balances: dict[str, int] = {}
    for ev in events:
        if ev.amount is None:
            continue
        if ev.from_address != ZERO_ADDRESS:
            balances[ev.from_address] = balances.get(ev.from_address, 0) - ev.amount
        balances[ev.to_address] = balances.get(ev.to_address, 0) + ev.amount
    return balances


def rank_holders(balances: dict[str, int], *, exclude_zero_address: bool = False) -> list[Holder]:
    holders = [
        Holder(address=addr, balance=bal)
        for addr, bal in balances.items()
        if bal > 0 and not (exclude_zero_address and addr == ZERO_ADDRESS)
    ]
    holders.sort(key=lambda h: (-h.balance, h.address))
    return holders


async def build_ledger(
    indexer: IndexerClient,
    token_address: str,
    chain_id: int,
    *,
    clock: Callable[[], float] = time.time,
    exclude_zero_address: bool = False,
) -> HolderLedger:
    """Full replay of the token's Transfer history into a HolderLedger."""
    token_address = normalize_address(token_address, "token")
    scan = (
        Scan.select_from("transfer", "from", "to", "tokens", signatures=[TRANSFER_SIGNATURE])
        .where("chain", chain_id)
        .where("address", token_address)
    )
    rows = await indexer.execute(scan)
    events = [TransferEvent.from_row(r) for r in rows]
    skipped = sum(1 for ev in events if ev.amount is None)
    if skipped:
        logger.warning("ledger_transfers_without_amount", token=token_address, skipped=skipped)

    holders = rank_holders(replay_transfers(events), exclude_zero_address=exclude_zero_address)
    ledger = HolderLedger(
        token_address=token_address,
        chain_id=chain_id,
        holders=tuple(holders),
        total_supply=sum(h.balance for h in holders),
        computed_at=clock(),
        event_count=len(events),
    )
    logger.info(
        "ledger_recomputed",
        token=token_address,
        chain_id=chain_id,
        events=len(events),
        holders=len(holders),
    )
    return ledger
