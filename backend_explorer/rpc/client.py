"""
Chain JSON-RPC client for token metadata.

Responsibilities:
- eth_call ERC20 view functions (decimals, symbol, name, totalSupply)
  over a reused httpx.AsyncClient, decoding return data with eth_abi.
- Raise UpstreamError on transport failure, timeout, RPC error objects, or
  undecodable return data. No retries here; callers retry whole requests.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable

import httpx

from backend_explorer.config import Settings
from backend_explorer.core.exceptions import UpstreamError
from backend_explorer.explorer_logging import get_logger
from backend_explorer.indexer.values import normalize_address
from backend_explorer.rpc.abi import (
    SELECTOR_DECIMALS,
    SELECTOR_NAME,
    SELECTOR_SYMBOL,
    SELECTOR_TOTAL_SUPPLY,
    decode_string,
    decode_uint256,
)

logger = get_logger(__name__)


class ChainRpcClient:
    """JSON-RPC 2.0 over HTTP. One instance per process; close with aclose()."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_sec: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._rpc_url = rpc_url.strip()
        self._ids = itertools.count(1)
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "ChainRpcClient":
        return cls(settings.chain_rpc_url, timeout_sec=settings.upstream_timeout_sec, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        if not self._rpc_url:
            raise UpstreamError("CHAIN_RPC_URL is not configured")
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._http.post(self._rpc_url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            logger.warning("rpc_timeout", method=method, error=str(e))
            raise UpstreamError(f"RPC {method} timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning("rpc_http_error", method=method, status=e.response.status_code)
            raise UpstreamError(
                f"RPC {method} failed with HTTP {e.response.status_code}",
                e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("rpc_request_failed", method=method, error=str(e))
            raise UpstreamError(f"RPC {method} failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"RPC {method} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"RPC {method} returned an unexpected payload")
        if data.get("error"):
            err = data["error"]
            message = err.get("message", err) if isinstance(err, dict) else err
            raise UpstreamError(f"RPC error: {message}")
        if "result" not in data or data["result"] is None:
            raise UpstreamError(f"RPC {method} returned no result")
        return data["result"]

    async def eth_call(self, to: str, data: str) -> str:
        return await self._call("eth_call", [{"to": to, "data": data}, "latest"])

    async def _call_decoded(self, token: str, selector: str, decode: Callable[[str], Any]) -> Any:
        raw = await self.eth_call(token, selector)
        try:
            return decode(raw)
        except ValueError as e:
            raise UpstreamError(f"Undecodable return for {selector} on {token}: {e}") from e

    async def get_decimals(self, token: str) -> int:
        return await self._call_decoded(token, SELECTOR_DECIMALS, decode_uint256)

    async def get_symbol(self, token: str) -> str:
        return await self._call_decoded(token, SELECTOR_SYMBOL, decode_string)

    async def get_name(self, token: str) -> str:
        return await self._call_decoded(token, SELECTOR_NAME, decode_string)

    async def get_total_supply(self, token: str) -> int:
        return await self._call_decoded(token, SELECTOR_TOTAL_SUPPLY, decode_uint256)

    async def get_token_metadata(self, token: str) -> dict[str, Any]:
        """name, symbol, decimals and on-chain totalSupply for one token (four concurrent calls)."""
        token = normalize_address(token, "token")
        name, symbol, decimals, total_supply = await asyncio.gather(
            self.get_name(token),
            self.get_symbol(token),
            self.get_decimals(token),
            self.get_total_supply(token),
        )
        return {
            "address": token,
            "name": name,
            "symbol": symbol,
            "decimals": decimals,
            "totalSupply": str(total_supply),
        }
