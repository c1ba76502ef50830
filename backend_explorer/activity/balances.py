"""
Account token balances replayed from Transfer logs.

Per token contract: every Transfer received by the account adds the amount,
every Transfer sent subtracts it. Only positive results are reported.
Total value converts each balance with the token's decimals (from RPC) at a
fixed unit price; there is no price source.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal

from backend_explorer.explorer_logging import get_logger
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.models import TRANSFER_SIGNATURE, TransferEvent
from backend_explorer.indexer.query import Condition, Scan
from backend_explorer.indexer.values import normalize_address
from backend_explorer.rpc.client import ChainRpcClient

logger = get_logger(__name__)

PRICE_PER_TOKEN = Decimal(1)


@dataclass(frozen=True)
class TokenBalance:
    token: str
    balance: int

    def to_dict(self) -> dict[str, str]:
        return {"token": self.token, "balance": str(self.balance)}


def account_balances(events: list[TransferEvent], address: str) -> dict[str, int]:
    """Signed balance per token contract for one account. A self-transfer nets to zero."""
    address = address.lower()
    balances: dict[str, int] = {}
    for ev in events:
        if ev.amount is None or ev.token_address is None:
            continue
        current = balances.get(ev.token_address, 0)
        if ev.to_address == address:
            current += ev.amount
        if ev.from_address == address:
            current -= ev.amount
        balances[ev.token_address] = current
    return balances


async def get_account_token_balances(
    indexer: IndexerClient,
    address: str,
    *,
    chain_id: int,
) -> list[TokenBalance]:
    """Tokens the account holds a positive balance of, sorted by token address."""
    address = normalize_address(address)
    scan = (
        Scan.select_from("transfer", "address", "from", "to", "tokens", signatures=[TRANSFER_SIGNATURE])
        .where("chain", chain_id)
        .where_any(Condition("from", address), Condition("to", address))
    )
    rows = await indexer.execute(scan)
    events = [TransferEvent.from_row(r) for r in rows]
    balances = account_balances(events, address)
    held = [
        TokenBalance(token=token, balance=balance)
        for token, balance in sorted(balances.items())
        if balance > 0
    ]
    logger.debug("account_balances_replayed", address=address, events=len(events), tokens=len(held))
    return held


async def get_total_value(
    indexer: IndexerClient,
    rpc: ChainRpcClient,
    address: str,
    *,
    chain_id: int,
) -> float:
    """Sum of held balances scaled by token decimals, at PRICE_PER_TOKEN each."""
    held = await get_account_token_balances(indexer, address, chain_id=chain_id)
    if not held:
        return 0.0
    decimals = await asyncio.gather(*(rpc.get_decimals(b.token) for b in held))
    total = sum(
        (Decimal(b.balance).scaleb(-d) * PRICE_PER_TOKEN for b, d in zip(held, decimals)),
        Decimal(0),
    )
    return float(total)
