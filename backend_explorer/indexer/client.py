"""
Upstream indexer query client.

Responsibilities:
- Define the IndexerClient interface: execute one filtered Scan, return rows
  as dicts keyed by column name. Everything above this layer depends only
  on the interface, so tests can swap in an in-memory implementation.
- IndexSupplyClient: HTTP implementation posting SQL to the indexer query
  API, validating the response shape, and mapping transport failures,
  timeouts, and malformed payloads to UpstreamError.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Union

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from backend_explorer.config import Settings
from backend_explorer.core.exceptions import UpstreamError
from backend_explorer.explorer_logging import get_logger
from backend_explorer.indexer.query import Scan, render_sql

logger = get_logger(__name__)

RowValue = Union[str, int, None]


class IndexerColumn(BaseModel):
    name: str
    pgtype: str


class IndexerResult(BaseModel):
    """One result set of the indexer query API."""

    cursor: str | None = None
    columns: list[IndexerColumn]
    rows: list[list[RowValue]]

    def to_dicts(self) -> list[dict[str, Any]]:
        names = [c.name for c in self.columns]
        return [dict(zip(names, row)) for row in self.rows]


_RESPONSE_ADAPTER = TypeAdapter(list[IndexerResult])


# -----------------------------------------------------------------------------
# Interface
# -----------------------------------------------------------------------------


class IndexerClient(ABC):
    """Filtered/sorted/limited scans over the indexer's read-only relations."""

    @abstractmethod
    async def execute(self, scan: Scan) -> list[dict[str, Any]]:
        """Run one scan; raise UpstreamError on failure or timeout."""
        ...

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""
        return None


# -----------------------------------------------------------------------------
# HTTP implementation
# -----------------------------------------------------------------------------


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return fallback


class IndexSupplyClient(IndexerClient):
    """
    Indexer query API over HTTP.

    Each scan is one POST of [{cursor, signatures, query}] with the API key as
    query parameter. A single httpx.AsyncClient is reused; its timeout is the
    caller-imposed upstream timeout.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        chain_cursor: str,
        timeout_sec: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not endpoint.strip():
            raise ValueError("endpoint must be non-empty")
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._endpoint = endpoint.strip()
        self._api_key = api_key.strip()
        self._chain_cursor = chain_cursor
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "IndexSupplyClient":
        return cls(
            settings.indexer_endpoint,
            settings.indexer_api_key,
            chain_cursor=settings.chain_cursor,
            timeout_sec=settings.upstream_timeout_sec,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "IndexSupplyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def execute(self, scan: Scan) -> list[dict[str, Any]]:
        if not self._api_key:
            raise UpstreamError("INDEXER_API_KEY is not configured")

        query = render_sql(scan)
        body = [
            {
                "cursor": self._chain_cursor,
                "signatures": list(scan.signatures) or [""],
                "query": query,
            }
        ]
        started = time.perf_counter()
        try:
            resp = await self._http.post(
                self._endpoint,
                params={"api-key": self._api_key},
                json=body,
            )
        except httpx.TimeoutException as e:
            logger.warning("indexer_scan_timeout", table=scan.table, error=str(e))
            raise UpstreamError(f"Indexer request timed out ({scan.table})") from e
        except httpx.HTTPError as e:
            logger.warning(
                "indexer_scan_failed",
                table=scan.table,
                endpoint=self._endpoint,
                error=str(e),
            )
            raise UpstreamError(f"Indexer request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            if not resp.is_error:
                raise UpstreamError("Indexer API returned invalid JSON", resp.status_code) from e
            payload = None

        if resp.is_error:
            message = _error_message(payload, resp.reason_phrase)
            logger.warning(
                "indexer_scan_rejected",
                table=scan.table,
                status=resp.status_code,
                message=message,
            )
            raise UpstreamError(
                f"Indexer API error ({resp.status_code}): {message}", resp.status_code
            )

        try:
            results = _RESPONSE_ADAPTER.validate_python(payload)
        except PydanticValidationError as e:
            message = _error_message(payload, str(e))
            raise UpstreamError(f"Indexer response shape is unexpected: {message}") from e
        if not results:
            raise UpstreamError("Indexer returned an empty result set")

        rows = results[0].to_dicts()
        logger.debug(
            "indexer_scan",
            table=scan.table,
            rows=len(rows),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return rows
