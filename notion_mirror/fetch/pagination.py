"""
Cursor pagination over remote store endpoints.

Pages are requested strictly one after another: the next cursor is only
known once the current response has been consumed.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Awaitable, Callable


PageFetcher = Callable[[str | None], Awaitable[dict[str, Any]]]


async def iter_pages(fetch: PageFetcher) -> AsyncIterator[list[dict[str, Any]]]:
    """Yield the ``results`` of each response until the cursor runs out."""
    cursor: str | None = None
    while True:
        response = await fetch(cursor)
        yield list(response.get("results") or [])
        cursor = response.get("next_cursor") or None
        if cursor is None:
            break


async def collect_all(fetch: PageFetcher) -> list[dict[str, Any]]:
    """Concatenate every page of results in order."""
    records: list[dict[str, Any]] = []
    async for page in iter_pages(fetch):
        records.extend(page)
    return records
