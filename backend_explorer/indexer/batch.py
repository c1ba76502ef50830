"""
Batched row fetcher.

Resolves a set of identifiers into full rows in chunks no larger than the
indexer's query-size limit. Chunks are queried concurrently and the call
completes only when every chunk has completed; one failed chunk fails the
whole fetch (no partial results).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Collection, Iterable, TypeVar

from backend_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 500


def chunked(ids: list[str], size: int) -> list[list[str]]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    return [ids[i : i + size] for i in range(0, len(ids), size)]


def pending_ids(ids: Iterable[str], resolved: Collection[str] = ()) -> list[str]:
    """Ordered, de-duplicated ids that are not already resolved."""
    seen: set[str] = set()
    out: list[str] = []
    for ident in ids:
        if ident in seen or ident in resolved:
            continue
        seen.add(ident)
        out.append(ident)
    return out


async def fetch_in_batches(
    ids: Iterable[str],
    fetch: Callable[[list[str]], Awaitable[list[T]]],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    resolved: Collection[str] = (),
) -> list[T]:
    """
    Fetch rows for ids in chunks of at most batch_size.

    Args:
        ids: Identifiers to resolve; duplicates are requested once.
        fetch: Coroutine issuing one upstream query for a chunk.
        batch_size: Upper bound on identifiers per query.
        resolved: Identifiers already resolved by an earlier result; never re-requested.

    Returns:
        Union of all chunk results, in chunk order.
    """
    todo = pending_ids(ids, resolved)
    if not todo:
        return []
    chunks = chunked(todo, batch_size)
    logger.debug("batch_fetch_start", ids=len(todo), chunks=len(chunks), batch_size=batch_size)
    results = await asyncio.gather(*(fetch(chunk) for chunk in chunks))
    rows = [row for chunk_rows in results for row in chunk_rows]
    logger.debug("batch_fetch_complete", ids=len(todo), rows=len(rows))
    return rows
