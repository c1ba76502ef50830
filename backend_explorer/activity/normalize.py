"""
Transaction normalisation into the JSON-RPC transaction shape.

Quantities become minimal hex quantities, a missing recipient stays null
(contract creation), and signature components are emitted as 0x0: the
indexer does not carry v/r/s, so they are declared absent rather than
invented. Block hash and transaction index are likewise null.
"""

from __future__ import annotations

from typing import Any

from backend_explorer.core.exceptions import DataIntegrityError
from backend_explorer.indexer.models import TransactionRow
from backend_explorer.indexer.values import (
    to_address_value,
    to_hex_data,
    to_quantity_hex,
)


def to_rpc_transaction(row: TransactionRow, chain_id: int) -> dict[str, Any]:
    """Map one txs row to an RPC-style transaction. Raises DataIntegrityError when the sender is missing."""
    sender = to_address_value(row.from_address)
    if not sender:
        raise DataIntegrityError(f'Transaction {row.hash} is missing a "from" address')

    return {
        "blockHash": None,
        "blockNumber": to_quantity_hex(row.block_num),
        "chainId": to_quantity_hex(chain_id),
        "from": sender,
        "gas": to_quantity_hex(row.gas),
        "gasPrice": to_quantity_hex(row.gas_price),
        "hash": to_hex_data(row.hash),
        "input": to_hex_data(row.input),
        "nonce": to_quantity_hex(row.nonce),
        "to": to_address_value(row.to_address),
        "transactionIndex": None,
        "value": to_quantity_hex(row.value),
        "type": to_quantity_hex(row.type),
        "v": "0x0",
        "r": "0x0",
        "s": "0x0",
    }
