"""
Tests for the scan query model, SQL rendering, and IndexSupplyClient over httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from backend_explorer.config import Settings
from backend_explorer.core.exceptions import UpstreamError
from backend_explorer.indexer import (
    DESC,
    TRANSFER_SIGNATURE,
    Condition,
    IndexSupplyClient,
    Scan,
    fetch_latest_block,
    render_sql,
)
from tests.fakes import ALICE, CHAIN_ID

ENDPOINT = "http://indexer.test/v2/query"


def _client(handler, api_key="secret", **kwargs):
    return IndexSupplyClient(
        ENDPOINT,
        api_key,
        chain_cursor=f"{CHAIN_ID}-0",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _run(client, scan):
    async def go():
        async with client:
            return await client.execute(scan)

    return asyncio.run(go())


def _ok(columns, rows):
    return [{"cursor": f"{CHAIN_ID}-99", "columns": [{"name": c, "pgtype": "text"} for c in columns], "rows": rows}]


# -----------------------------------------------------------------------------
# Query model
# -----------------------------------------------------------------------------


def test_render_full_scan():
    scan = (
        Scan.select_from("transfer", "tx_hash", "block_num", signatures=[TRANSFER_SIGNATURE])
        .where("chain", CHAIN_ID)
        .where_any(Condition("from", ALICE), Condition("to", ALICE))
        .order_by("block_num", DESC)
        .order_by("tx_hash", DESC)
        .limit(11)
        .offset(5)
        .distinct()
    )

    sql = render_sql(scan)

    assert "\n" not in sql
    assert sql.startswith("SELECT DISTINCT tx_hash, block_num FROM transfer WHERE ")
    assert f"chain = {CHAIN_ID}" in sql
    # Reserved words are quoted by the dialect
    assert f"(\"from\" = '{ALICE}' OR \"to\" = '{ALICE}')" in sql
    assert sql.endswith("ORDER BY block_num DESC, tx_hash DESC LIMIT 11 OFFSET 5")


def test_render_in_condition_and_escaping():
    scan = Scan.select_from("txs", "hash").where_in("hash", ["0x01", "0x02"]).where("note", "it's")

    sql = render_sql(scan)

    assert "hash IN ('0x01', '0x02')" in sql
    assert "note = 'it''s'" in sql
    assert "OFFSET" not in sql


def test_scan_builders_are_immutable():
    base = Scan.select_from("txs", "hash")
    filtered = base.where("chain", 1)

    assert base.conditions == ()
    assert filtered.conditions == (Condition("chain", 1),)


def test_scan_rejects_invalid_shapes():
    with pytest.raises(ValueError):
        Scan.select_from("txs")
    with pytest.raises(ValueError):
        Scan.select_from("txs", "hash").where_in("hash", [])
    with pytest.raises(ValueError):
        Scan.select_from("txs", "hash").order_by("hash", "sideways")
    with pytest.raises(ValueError):
        Scan.select_from("txs", "hash").where_any(Condition("a", 1)).where_any(Condition("b", 2))
    with pytest.raises(TypeError):
        render_sql(Scan.select_from("txs", "hash").where("value", 1.5))


# -----------------------------------------------------------------------------
# HTTP client
# -----------------------------------------------------------------------------


def test_execute_posts_query_and_maps_rows():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ok(["hash", "block_num"], [["0xaa", 10], ["0xbb", 11]]))

    scan = Scan.select_from("txs", "hash", "block_num").where("chain", CHAIN_ID)
    rows = _run(_client(handler), scan)

    assert rows == [{"hash": "0xaa", "block_num": 10}, {"hash": "0xbb", "block_num": 11}]
    assert seen["params"] == {"api-key": "secret"}
    assert seen["body"] == [
        {"cursor": f"{CHAIN_ID}-0", "signatures": [""], "query": render_sql(scan)}
    ]


def test_execute_sends_event_signatures():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ok(["tokens"], []))

    scan = Scan.select_from("transfer", "tokens", signatures=[TRANSFER_SIGNATURE])
    assert _run(_client(handler), scan) == []
    assert seen["body"][0]["signatures"] == [TRANSFER_SIGNATURE]


def test_missing_api_key_fails_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_ok(["hash"], []))

    with pytest.raises(UpstreamError, match="INDEXER_API_KEY"):
        _run(_client(handler, api_key=""), Scan.select_from("txs", "hash"))
    assert calls == []


def test_error_status_uses_upstream_message():
    def handler(request):
        return httpx.Response(400, json={"message": "column does not exist"})

    with pytest.raises(UpstreamError) as exc:
        _run(_client(handler), Scan.select_from("txs", "nope"))
    assert exc.value.status_code == 400
    assert "column does not exist" in exc.value.message


def test_error_status_without_json_body():
    def handler(request):
        return httpx.Response(503, text="<html>down</html>")

    with pytest.raises(UpstreamError, match=r"\(503\)"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_invalid_json_is_upstream_error():
    def handler(request):
        return httpx.Response(200, text="not json")

    with pytest.raises(UpstreamError, match="invalid JSON"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_unexpected_shape_is_upstream_error():
    def handler(request):
        return httpx.Response(200, json={"rows": []})

    with pytest.raises(UpstreamError, match="shape"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_empty_result_list_is_upstream_error():
    def handler(request):
        return httpx.Response(200, json=[])

    with pytest.raises(UpstreamError, match="empty result"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_timeout_is_upstream_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamError, match="timed out"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_connection_failure_is_upstream_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamError, match="failed"):
        _run(_client(handler), Scan.select_from("txs", "hash"))


def test_from_settings_uses_chain_cursor():
    settings = Settings(indexer_endpoint=ENDPOINT, indexer_api_key="k", chain_id=CHAIN_ID)
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ok(["num"], [[42]]))

    client = IndexSupplyClient.from_settings(settings, transport=httpx.MockTransport(handler))
    assert _run(client, Scan.select_from("blocks", "num")) == [{"num": 42}]
    assert seen["body"][0]["cursor"] == f"{CHAIN_ID}-0"


def test_constructor_validates_arguments():
    with pytest.raises(ValueError):
        IndexSupplyClient(" ", "k", chain_cursor="1-0")
    with pytest.raises(ValueError):
        IndexSupplyClient(ENDPOINT, "k", chain_cursor="1-0", timeout_sec=0)


# -----------------------------------------------------------------------------
# Latest block
# -----------------------------------------------------------------------------


def test_fetch_latest_block(indexer):
    indexer.add("blocks", num=7)
    indexer.add("blocks", num=9)
    indexer.add("blocks", num=8)

    assert asyncio.run(fetch_latest_block(indexer, CHAIN_ID)) == 9


def test_fetch_latest_block_without_blocks(indexer):
    with pytest.raises(UpstreamError):
        asyncio.run(fetch_latest_block(indexer, CHAIN_ID))
