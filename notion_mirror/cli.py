"""
Command-line interface for the Notion content mirror.

Uses Typer to provide a CLI with options for the main configuration
settings. Loads a .env file first so the Notion token and database id can
live outside the YAML config.
"""

from __future__ import annotations

import json
from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import AppConfig, load_config
from .fetch.client import RemoteStoreError
from .output.schema import build_schema_document
from .runner import run_promote, run_sync

app = typer.Typer(add_completion=False)
console = Console()


def _load(config: Path | None) -> AppConfig:
    load_dotenv()
    return load_config(str(config) if config else None)


@app.command()
def sync(
    output: Path = typer.Option(Path("."), "--output", "-o", help="Root for backup, media and API output."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    download_assets: bool | None = typer.Option(
        None,
        "--download-assets/--no-download-assets",
        help="Mirror hero images, block media and audio locally.",
    ),
    promote: bool | None = typer.Option(
        None,
        "--promote/--no-promote",
        help='Move "Ready for Web" pages to "Published" after outputs are written.',
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override the Notion integration token (default: notion.api_key or its env var).",
    ),
    database_id: str | None = typer.Option(
        None,
        "--database-id",
        help="Override the content database id.",
    ),
):
    """Mirror the Notion database into backup and static API files.

    Args:
        output: Root directory for all generated files
        config: Optional path to YAML config file
        progress: Whether to show progress bar
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
        download_assets: Enable/disable local media mirroring
        promote: Enable/disable status promotion after the sync
        api_key: Override Notion token
        database_id: Override Notion database id
    """
    cfg = _load(config)

    # Override with CLI options
    if api_key:
        cfg.notion.api_key = api_key
    if database_id:
        cfg.notion.database_id = database_id
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file
    if download_assets is not None:
        cfg.assets.enabled = download_assets
    if promote is not None:
        cfg.publish.promote_after_sync = promote

    try:
        report = run_sync(cfg, output, show_progress=progress, console=console)
    except (RemoteStoreError, ValueError) as exc:
        console.print(f"[red]Sync failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"Mirrored {report.total} item(s) into {output}")


@app.command()
def schema(
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the schema here instead of printing it."
    ),
):
    """Emit the JSON schema describing every content type."""
    document = build_schema_document()
    text = json.dumps(document, ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(f"{text}\n", encoding="utf-8")
    console.print(f"Schema written: {output}")


@app.command()
def promote(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    from_status: str | None = typer.Option(None, "--from-status"),
    to_status: str | None = typer.Option(None, "--to-status"),
):
    """Move pages from one status to another without syncing."""
    cfg = _load(config)
    if from_status:
        cfg.publish.from_status = from_status
    if to_status:
        cfg.publish.to_status = to_status
    try:
        run_promote(cfg, console=console)
    except ValueError as exc:
        console.print(f"[red]Promotion failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
