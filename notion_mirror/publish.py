"""
Post-publish status promotion.

After a sync has written its outputs, pages still marked "Ready for Web"
are moved to "Published". This step is best-effort: any failure is logged
as a non-critical warning and never fails the run.
"""

from __future__ import annotations

import logging

from .core.extractors import extract_title, page_property
from .fetch.client import RemoteStore, status_filter
from .fetch.pagination import collect_all
from .utils.logging import log_event, log_warning


async def promote_ready_pages(
    client: RemoteStore,
    database_id: str,
    from_status: str = "Ready for Web",
    to_status: str = "Published",
    logger: logging.Logger | None = None,
) -> int:
    """Move every page in ``from_status`` to ``to_status``.

    Returns:
        Number of pages updated before any failure occurred
    """
    updated = 0
    try:
        pages = await collect_all(
            lambda cursor: client.query_database(
                database_id, filter=status_filter([from_status]), start_cursor=cursor
            )
        )
        log_event(
            logger,
            "Pages awaiting promotion",
            event="promote_found",
            count=len(pages),
            from_status=from_status,
        )
        for page in pages:
            if "properties" not in page:
                continue
            await client.update_page_status(page["id"], to_status)
            updated += 1
            log_event(
                logger,
                "Page promoted",
                event="page_promoted",
                page_id=page["id"],
                title=extract_title(page_property(page, "Title", "Name")) or "Untitled",
                to_status=to_status,
            )
    except Exception as exc:  # noqa: BLE001
        # Non-fatal: publishing already happened, status is bookkeeping only.
        log_warning(
            logger,
            "Could not update page statuses (non-critical)",
            event="promote_failed",
            error=f"{type(exc).__name__}: {exc}",
            updated=updated,
        )
    return updated
