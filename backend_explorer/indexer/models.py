"""
Typed rows read from the upstream indexer.

TransactionRow mirrors the txs relation; TransferEvent mirrors the transfer
event table (one ERC20-style Transfer log). Both are read-only snapshots of
upstream data and are never mutated here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_explorer.core.exceptions import DataIntegrityError
from backend_explorer.indexer.values import to_address_value, to_int, to_unix_seconds

# Event signatures the indexer uses to decode raw log topics into columns
TRANSFER_SIGNATURE = "Transfer(address indexed from, address indexed to, uint tokens)"
TOKEN_CREATED_SIGNATURE = (
    "TokenCreated(address indexed token, uint256 indexed tokenId, string name, "
    "string symbol, string currency, address quoteToken, address admin)"
)

TX_COLUMNS = (
    "hash",
    "block_num",
    "from",
    "to",
    "value",
    "input",
    "nonce",
    "gas",
    "gas_price",
    "type",
)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text.lower() if text else None


@dataclass(frozen=True)
class TransactionRow:
    """Single row of the txs relation. from_address may be None only for malformed upstream data."""

    hash: str
    block_num: int
    from_address: str | None
    to_address: str | None
    value: int
    input: str
    nonce: int
    gas: int
    gas_price: int
    type: int

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TransactionRow":
        try:
            return cls(
                hash=str(row["hash"]).lower(),
                block_num=to_int(row.get("block_num")),
                from_address=_text(row.get("from")),
                to_address=_text(row.get("to")),
                value=to_int(row.get("value")),
                input=str(row.get("input") or ""),
                nonce=to_int(row.get("nonce")),
                gas=to_int(row.get("gas")),
                gas_price=to_int(row.get("gas_price")),
                type=to_int(row.get("type")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataIntegrityError(f"Malformed transaction row from indexer: {e}") from e


@dataclass(frozen=True)
class TransferEvent:
    """
    One Transfer log. Identity is (tx_hash, log_idx) within a chain.

    Scans select only the columns they need, so everything except the
    participants is optional. amount is None when the indexer could not
    decode the value.
    """

    from_address: str
    to_address: str
    amount: int | None
    token_address: str | None = None
    tx_hash: str | None = None
    block_num: int | None = None
    log_idx: int | None = None
    timestamp: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TransferEvent":
        try:
            tokens = row.get("tokens")
            sender = to_address_value(row["from"])
            recipient = to_address_value(row["to"])
            if sender is None or recipient is None:
                raise DataIntegrityError(
                    f"Transfer log {row.get('tx_hash')}:{row.get('log_idx')} is missing a participant"
                )
            return cls(
                from_address=sender,
                to_address=recipient,
                amount=None if tokens is None else to_int(tokens),
                token_address=_text(row.get("address")),
                tx_hash=_text(row.get("tx_hash")),
                block_num=None if row.get("block_num") is None else to_int(row["block_num"]),
                log_idx=None if row.get("log_idx") is None else to_int(row["log_idx"]),
                timestamp=to_unix_seconds(row.get("block_timestamp")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataIntegrityError(f"Malformed transfer row from indexer: {e}") from e
