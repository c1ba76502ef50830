"""
Test doubles shared by the test modules.

FakeIndexer stands in for the upstream indexer: it evaluates Scan objects
over in-memory rows (equality / IN / OR-group filters, DISTINCT, ordering,
limit, offset) and records every scan it receives. rpc_transport answers
JSON-RPC eth_call requests for httpx.MockTransport.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
from eth_abi import encode as abi_encode
from eth_utils import encode_hex

from backend_explorer.core.exceptions import UpstreamError
from backend_explorer.indexer.client import IndexerClient
from backend_explorer.indexer.query import DESC, Condition, Scan
from backend_explorer.indexer.values import ZERO_ADDRESS

CHAIN_ID = 4217

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
DAVE = "0x" + "d4" * 20
TOKEN = "0x" + "70" * 20
TOKEN_2 = "0x" + "71" * 20
ROUTER = "0x" + "e5" * 20


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def _matches(row: dict[str, Any], cond: Condition) -> bool:
    if cond.op == "in":
        return row.get(cond.column) in cond.value
    return row.get(cond.column) == cond.value


class FakeIndexer(IndexerClient):
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.scans: list[Scan] = []
        self.fail_when: Callable[[Scan], bool] | None = None

    def add(self, table: str, **row: Any) -> dict[str, Any]:
        row.setdefault("chain", CHAIN_ID)
        self.tables.setdefault(table, []).append(row)
        return row

    def add_tx(
        self,
        n: int,
        *,
        block: int,
        sender: str | None = ALICE,
        to: str | None = BOB,
        value: int = 0,
        **extra: Any,
    ) -> dict[str, Any]:
        row = {
            "hash": tx_hash(n),
            "block_num": block,
            "from": sender,
            "to": to,
            "value": str(value),
            "input": "0x",
            "nonce": str(n),
            "gas": "21000",
            "gas_price": "1000000000",
            "type": 2,
        }
        row.update(extra)
        return self.add("txs", **row)

    def add_transfer(
        self,
        *,
        sender: str | None,
        to: str | None,
        amount: int | None,
        token: str = TOKEN,
        n: int = 0,
        block: int = 1,
        log_idx: int = 0,
        timestamp: Any = None,
    ) -> dict[str, Any]:
        return self.add(
            "transfer",
            address=token,
            **{"from": sender, "to": to},
            tokens=None if amount is None else str(amount),
            tx_hash=tx_hash(n),
            block_num=block,
            log_idx=log_idx,
            block_timestamp=timestamp,
        )

    def mint(self, to: str, amount: int, **kw: Any) -> dict[str, Any]:
        return self.add_transfer(sender=ZERO_ADDRESS, to=to, amount=amount, **kw)

    def scans_of(self, table: str) -> list[Scan]:
        return [s for s in self.scans if s.table == table]

    async def execute(self, scan: Scan) -> list[dict[str, Any]]:
        self.scans.append(scan)
        if self.fail_when is not None and self.fail_when(scan):
            raise UpstreamError(f"fake indexer failure on {scan.table}")

        rows = [
            r
            for r in self.tables.get(scan.table, [])
            if all(_matches(r, c) for c in scan.conditions)
            and (not scan.any_of or any(_matches(r, c) for c in scan.any_of))
        ]
        for column, direction in reversed(scan.order):
            rows.sort(key=lambda r: r.get(column), reverse=(direction == DESC))

        projected = [{c: r.get(c) for c in scan.columns} for r in rows]
        if scan.is_distinct:
            seen: set[tuple[Any, ...]] = set()
            unique = []
            for r in projected:
                key = tuple(r.values())
                if key not in seen:
                    seen.add(key)
                    unique.append(r)
            projected = unique

        start = scan.row_offset or 0
        end = None if scan.row_limit is None else start + scan.row_limit
        return projected[start:end]


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def abi_uint(n: int) -> str:
    return encode_hex(abi_encode(["uint256"], [n]))


def abi_string(text: str) -> str:
    return encode_hex(abi_encode(["string"], [text]))


def rpc_transport(
    contracts: dict[str, dict[str, str]],
    *,
    calls: list[dict[str, Any]] | None = None,
) -> httpx.MockTransport:
    """
    JSON-RPC mock: contracts maps token address -> {selector: hex return}.
    Unknown contract/selector answers with a JSON-RPC error object.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body)
        call = body["params"][0]
        result = contracts.get(call["to"], {}).get(call["data"])
        if result is None:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "execution reverted"}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return httpx.MockTransport(handler)
