"""
Pytest fixtures for Backend Explorer tests.

Upstream is the in-memory FakeIndexer (tests/fakes.py); RPC goes through
httpx.MockTransport; the API is exercised with FastAPI's TestClient.
"""

from __future__ import annotations

import pytest

from tests.fakes import (
    CHAIN_ID,
    TOKEN,
    FakeClock,
    FakeIndexer,
    abi_string,
    abi_uint,
    rpc_transport,
)


@pytest.fixture
def indexer() -> FakeIndexer:
    return FakeIndexer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(indexer):
    """Services container over FakeIndexer and a mocked RPC endpoint."""
    from backend_explorer.api_server.services import ExplorerServices
    from backend_explorer.config import Settings
    from backend_explorer.rpc import ChainRpcClient

    contracts = {
        TOKEN: {
            "0x06fdde03": abi_string("Alpha USD"),
            "0x95d89b41": abi_string("AUSD"),
            "0x313ce567": abi_uint(6),
            "0x18160ddd": abi_uint(600),
        },
    }
    rpc = ChainRpcClient("http://rpc.test", transport=rpc_transport(contracts))
    settings = Settings(chain_id=CHAIN_ID, chain_rpc_url="http://rpc.test")
    return ExplorerServices.from_settings(settings, indexer=indexer, rpc=rpc)


@pytest.fixture
def client(services):
    """FastAPI TestClient bound to the injected services."""
    from fastapi.testclient import TestClient

    from backend_explorer.api_server.server import create_app

    with TestClient(create_app(services)) as test_client:
        yield test_client
