"""
Main pipeline orchestration for the content mirror.

This module coordinates the entire workflow:
1. List visible pages from the Notion database
2. Fetch blocks and transform every page (media mirrored locally)
3. Write the backup snapshot and static API documents
4. Optionally promote "Ready for Web" pages to "Published"

Page and block retrieval failures abort the run. Asset downloads and
status promotion degrade to warnings.
"""

from __future__ import annotations

import asyncio
from contextlib import nullcontext
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import httpx
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .assets.cache import AssetCache
from .config import AppConfig, get_api_key, get_database_id
from .core.loader import ContentLoader, RunCache
from .core.types import Content, ContentType
from .fetch.client import NotionClient, RemoteStore
from .output.api_export import write_api_documents
from .output.backup import BackupResult, BackupWriter
from .publish import promote_ready_pages
from .utils.logging import log_event, setup_logging


SYNC_STAGES = 3


@dataclass
class SyncReport:
    """Outcome of one sync run.

    Attributes:
        total: Number of content items mirrored
        by_type: Item count per content type
        backup: Paths written by the backup, when enabled
        api_paths: Static API documents written
        assets: Asset cache counters, when asset mirroring is enabled
        promoted: Pages moved to the published status
    """

    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    backup: BackupResult | None = None
    api_paths: list[Path] = field(default_factory=list)
    assets: dict[str, int] | None = None
    promoted: int = 0


async def sync_content(
    cfg: AppConfig,
    client: RemoteStore,
    database_id: str,
    output_dir: Path,
    logger: logging.Logger | None = None,
    asset_transport: httpx.AsyncBaseTransport | None = None,
    progress: Progress | None = None,
    stage_task: Any = None,
) -> SyncReport:
    """Run the sync against an already constructed remote store client."""
    output_dir = Path(output_dir)
    asset_cache = None
    if cfg.assets.enabled:
        asset_cache = AssetCache(
            output_dir / cfg.assets.media_dir,
            public_prefix=cfg.assets.public_prefix,
            default_extension=cfg.assets.default_extension,
            timeout_seconds=cfg.assets.timeout_seconds,
            transport=asset_transport,
            logger=logger,
        )

    loader = ContentLoader(
        client,
        database_id,
        statuses=cfg.notion.visible_statuses,
        cache=RunCache(),
        asset_cache=asset_cache,
        expand_children=cfg.assets.expand_children,
        logger=logger,
    )

    items = await loader.get_all()
    _advance(progress, stage_task)
    report = SyncReport(total=len(items), by_type=count_by_type(items))

    if cfg.backup.enabled:
        writer = BackupWriter(output_dir / cfg.backup.base_dir, logger=logger)
        report.backup = writer.perform_full_backup(items)
    if cfg.backup.api_dir:
        report.api_paths = write_api_documents(items, output_dir / cfg.backup.api_dir, logger)
    _advance(progress, stage_task)

    if asset_cache is not None:
        report.assets = asset_cache.get_stats()

    # Promotion runs only once every output above has been written
    if cfg.publish.promote_after_sync:
        report.promoted = await promote_ready_pages(
            client,
            database_id,
            from_status=cfg.publish.from_status,
            to_status=cfg.publish.to_status,
            logger=logger,
        )
    _advance(progress, stage_task)

    log_event(
        logger,
        "Sync complete",
        event="sync_complete",
        total=report.total,
        by_type=report.by_type,
        assets=report.assets,
        promoted=report.promoted,
    )
    return report


def run_sync(
    cfg: AppConfig,
    output_dir: Path,
    show_progress: bool = True,
    console: Console | None = None,
) -> SyncReport:
    """Run the complete sync pipeline with optional progress display.

    Args:
        cfg: Application configuration
        output_dir: Root directory for backup, media and API output
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)

    Returns:
        SyncReport describing what was written

    Raises:
        ValueError: If the Notion token or database id is not configured
        RemoteStoreError: If listing pages or blocks fails
    """
    output_dir = Path(output_dir)
    console = console or Console()
    logger = setup_logging(cfg.logging, output_dir / "logs")
    database_id = _require_database_id(cfg)
    api_key = get_api_key(cfg.notion)

    async def _run() -> SyncReport:
        async with NotionClient(cfg.notion, api_key, logger=logger) as client:
            progress = _build_progress(console) if show_progress else None
            with progress if progress is not None else nullcontext():
                stage_task = progress.add_task("Sync", total=SYNC_STAGES) if progress is not None else None
                return await sync_content(
                    cfg,
                    client,
                    database_id,
                    output_dir,
                    logger=logger,
                    progress=progress,
                    stage_task=stage_task,
                )

    log_event(logger, "Sync start", event="sync_start", output=str(output_dir))
    report = asyncio.run(_run())
    render_report(report, console)
    return report


def run_promote(cfg: AppConfig, console: Console | None = None) -> int:
    """Promote pages without syncing; returns the number of pages updated."""
    console = console or Console()
    logger = setup_logging(cfg.logging, None)
    database_id = _require_database_id(cfg)
    api_key = get_api_key(cfg.notion)

    async def _run() -> int:
        async with NotionClient(cfg.notion, api_key, logger=logger) as client:
            return await promote_ready_pages(
                client,
                database_id,
                from_status=cfg.publish.from_status,
                to_status=cfg.publish.to_status,
                logger=logger,
            )

    promoted = asyncio.run(_run())
    console.print(f'Promoted {promoted} page(s) to "{cfg.publish.to_status}"')
    return promoted


def count_by_type(items: list[Content]) -> dict[str, int]:
    return {t.value: sum(1 for item in items if item.content_type is t) for t in ContentType}


def render_report(report: SyncReport, console: Console) -> None:
    """Print a one-line summary per concern to the console."""
    types = ", ".join(f"{name}={count}" for name, count in report.by_type.items())
    console.print(f"[bold]Content[/bold]: total={report.total} ({types})")
    if report.assets is not None:
        console.print(
            "[bold]Assets[/bold]: "
            f"cached={report.assets['total']}, downloaded={report.assets['downloaded']}, "
            f"on_disk={report.assets['disk_hits']}, failed={report.assets['failed']}"
        )
    if report.backup is not None:
        console.print(f"[bold]Backup[/bold]: {report.backup.backup_dir}")
        if report.backup.duplicates:
            console.print(f"[yellow]Duplicate slugs[/yellow]: {report.backup.duplicates}")
    if report.promoted:
        console.print(f"[bold]Promoted[/bold]: {report.promoted}")


def _require_database_id(cfg: AppConfig) -> str:
    database_id = get_database_id(cfg.notion)
    if not database_id:
        raise ValueError(
            f"Notion database id is required. Set {cfg.notion.database_id_env} "
            "or configure notion.database_id in config."
        )
    return database_id


def _build_progress(console: Console) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )


def _advance(progress: Progress | None, task: Any) -> None:
    if progress is not None and task is not None:
        progress.advance(task, 1)
