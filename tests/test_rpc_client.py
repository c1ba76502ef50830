"""
Tests for ERC20 metadata over JSON-RPC (httpx.MockTransport) and ABI decoding.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from eth_abi import encode as abi_encode
from eth_utils import encode_hex

from backend_explorer.core.exceptions import UpstreamError, ValidationError
from backend_explorer.rpc import ChainRpcClient
from backend_explorer.rpc.abi import (
    SELECTOR_DECIMALS,
    SELECTOR_NAME,
    SELECTOR_SYMBOL,
    SELECTOR_TOTAL_SUPPLY,
    decode_string,
    decode_uint256,
)
from tests.fakes import TOKEN, TOKEN_2, abi_string, abi_uint, rpc_transport

RPC_URL = "http://rpc.test"

METADATA = {
    TOKEN: {
        "0x06fdde03": abi_string("Alpha USD"),
        "0x95d89b41": abi_string("AUSD"),
        "0x313ce567": abi_uint(6),
        "0x18160ddd": abi_uint(10**12),
    },
}


def _run(coro_fn, transport):
    async def go():
        rpc = ChainRpcClient(RPC_URL, transport=transport)
        try:
            return await coro_fn(rpc)
        finally:
            await rpc.aclose()

    return asyncio.run(go())


def test_decode_uint256():
    assert decode_uint256(abi_uint(18)) == 18
    with pytest.raises(ValueError):
        decode_uint256("0x01")


def test_selectors_match_erc20_abi():
    assert (SELECTOR_DECIMALS, SELECTOR_SYMBOL, SELECTOR_NAME, SELECTOR_TOTAL_SUPPLY) == (
        "0x313ce567",
        "0x95d89b41",
        "0x06fdde03",
        "0x18160ddd",
    )


def test_decode_string_dynamic_and_bytes32():
    assert decode_string(abi_string("Alpha USD")) == "Alpha USD"
    assert decode_string("0x" + b"MKR".hex() + "00" * 29) == "MKR"


def test_decode_string_rejects_invalid_utf8():
    raw = encode_hex(abi_encode(["bytes"], [b"\xff\xfe\xfd"]))
    with pytest.raises(ValueError):
        decode_string(raw)
    with pytest.raises(ValueError):
        decode_string("0x" + "ff" * 32)


def test_decode_rejects_truncated_data():
    with pytest.raises(ValueError):
        decode_string("0x" + "00" * 31)
    with pytest.raises(ValueError):
        decode_string("deadbeef")


def test_token_metadata():
    calls = []
    meta = _run(
        lambda rpc: rpc.get_token_metadata(TOKEN.upper().replace("0X", "0x")),
        rpc_transport(METADATA, calls=calls),
    )

    assert meta == {
        "address": TOKEN,
        "name": "Alpha USD",
        "symbol": "AUSD",
        "decimals": 6,
        "totalSupply": str(10**12),
    }
    assert sorted(c["params"][0]["data"] for c in calls) == sorted(METADATA[TOKEN])
    assert all(c["params"][1] == "latest" for c in calls)


def test_token_metadata_rejects_bad_address():
    with pytest.raises(ValidationError):
        _run(lambda rpc: rpc.get_token_metadata("0x12"), rpc_transport(METADATA))


def test_rpc_error_object_is_upstream_error():
    with pytest.raises(UpstreamError, match="execution reverted"):
        _run(lambda rpc: rpc.get_decimals(TOKEN_2), rpc_transport(METADATA))


def test_undecodable_return_is_upstream_error():
    contracts = {TOKEN: {SELECTOR_DECIMALS: "0x01"}}
    with pytest.raises(UpstreamError, match="Undecodable"):
        _run(lambda rpc: rpc.get_decimals(TOKEN), rpc_transport(contracts))


def test_http_error_status_is_upstream_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(UpstreamError) as exc:
        _run(lambda rpc: rpc.get_decimals(TOKEN), transport)
    assert exc.value.status_code == 500


def test_timeout_is_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("slow", request=request)

    with pytest.raises(UpstreamError, match="timed out"):
        _run(lambda rpc: rpc.get_decimals(TOKEN), httpx.MockTransport(handler))


def test_missing_rpc_url_fails_fast():
    async def go():
        rpc = ChainRpcClient("")
        try:
            return await rpc.get_decimals(TOKEN)
        finally:
            await rpc.aclose()

    with pytest.raises(UpstreamError, match="CHAIN_RPC_URL"):
        asyncio.run(go())
