"""
Backup snapshot of mirrored content.

Writes a dated folder under the backup root containing:
- all-experiences.json: every item in one document
- <type>s/<slug>.json: one document per item, grouped by content type
- metadata.json: counts, taxonomy, date range, index and AGI readiness

Duplicate slugs within a content type never overwrite each other; later
items get a numeric suffix (``ep1.json``, ``ep1-2.json``) and a warning is
logged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
import json
import logging
from pathlib import Path
import re
from typing import Any

from ..core.types import Content, ContentType, SCHEMA_VERSION
from ..utils.logging import log_event, log_warning


BACKUP_VERSION = "1.0"
BACKUP_SOURCE = "Notion API"
ALL_CONTENT_FILENAME = "all-experiences.json"
METADATA_FILENAME = "metadata.json"

_UNSAFE_STEM_CHARS = re.compile(r"[\\/:*?\"<>|\s]+")


@dataclass
class BackupResult:
    """Paths written by a full backup.

    Attributes:
        backup_dir: Dated folder holding the snapshot
        all_content: Aggregate document path
        items: Per-item document paths, in write order
        metadata: Metadata document path
        duplicates: "type:slug" -> occurrences, for slugs seen more than once
    """

    backup_dir: Path
    all_content: Path | None = None
    items: list[Path] = field(default_factory=list)
    metadata: Path | None = None
    duplicates: dict[str, int] = field(default_factory=dict)


class BackupWriter:
    """Writes JSON backup documents for a list of content items."""

    def __init__(
        self,
        base_dir: Path,
        run_date: date | None = None,
        logger: logging.Logger | None = None,
    ):
        run_date = run_date or datetime.now(timezone.utc).date()
        self.backup_dir = Path(base_dir) / run_date.isoformat()
        self.logger = logger

    def ensure_directory(self) -> None:
        if not self.backup_dir.exists():
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            log_event(self.logger, "Backup directory created", event="backup_dir_created", path=str(self.backup_dir))

    def save_all_content(self, items: list[Content]) -> Path:
        self.ensure_directory()
        path = self.backup_dir / ALL_CONTENT_FILENAME
        _write_json(
            path,
            {
                "version": BACKUP_VERSION,
                "backup_date": _now_iso(),
                "count": len(items),
                "data": [item.to_dict() for item in items],
            },
        )
        log_event(self.logger, "Saved all content", event="backup_all_saved", count=len(items), path=str(path))
        return path

    def save_individual_content(self, items: list[Content]) -> tuple[list[Path], dict[str, int]]:
        """Write one file per item; return the paths and any duplicate slug counts."""
        self.ensure_directory()
        paths: list[Path] = []
        slug_counts: dict[str, int] = {}

        for content_type in ContentType:
            typed = [item for item in items if item.content_type is content_type]
            if not typed:
                continue
            type_dir = self.backup_dir / f"{content_type.value}s"
            type_dir.mkdir(parents=True, exist_ok=True)

            for item in typed:
                stem = _safe_stem(item.slug) or _safe_stem(item.id) or "untitled"
                key = f"{content_type.value}:{stem}"
                count = slug_counts.get(key, 0) + 1
                slug_counts[key] = count
                filename = f"{stem}.json" if count == 1 else f"{stem}-{count}.json"

                path = type_dir / filename
                _write_json(
                    path,
                    {
                        "version": BACKUP_VERSION,
                        "backup_date": _now_iso(),
                        "data": item.to_dict(),
                    },
                )
                paths.append(path)

            log_event(
                self.logger,
                "Saved items by type",
                event="backup_type_saved",
                content_type=content_type.value,
                count=len(typed),
            )

        duplicates = {key: count for key, count in slug_counts.items() if count > 1}
        for key, count in duplicates.items():
            log_warning(
                self.logger,
                f"Duplicate slug {key!r} appears {count} times",
                event="backup_duplicate_slug",
                slug=key,
                count=count,
            )
        return paths, duplicates

    def save_metadata(self, items: list[Content]) -> Path:
        self.ensure_directory()
        path = self.backup_dir / METADATA_FILENAME
        _write_json(path, build_metadata(items))
        log_event(self.logger, "Saved metadata", event="backup_metadata_saved", path=str(path))
        return path

    def perform_full_backup(self, items: list[Content]) -> BackupResult:
        log_event(
            self.logger,
            "Backup start",
            event="backup_start",
            count=len(items),
            path=str(self.backup_dir),
        )
        result = BackupResult(backup_dir=self.backup_dir)
        result.all_content = self.save_all_content(items)
        result.items, result.duplicates = self.save_individual_content(items)
        result.metadata = self.save_metadata(items)
        log_event(self.logger, "Backup complete", event="backup_complete", path=str(self.backup_dir))
        return result


def build_metadata(items: list[Content]) -> dict[str, Any]:
    """Summarize a content set for the metadata document."""
    dates = sorted(item.base.date for item in items if item.base.date)
    return {
        "schema_version": SCHEMA_VERSION,
        "backup_date": _now_iso(),
        "backup_source": BACKUP_SOURCE,
        "total_count": len(items),
        "content_types": {
            content_type.value: sum(1 for item in items if item.content_type is content_type)
            for content_type in ContentType
        },
        "categories": _distinct(item.base.web_category for item in items),
        "projects": _distinct(tag for item in items for tag in item.base.project),
        "all_concepts": _distinct(tag for item in items for tag in item.base.concepts),
        "date_range": {
            "earliest": dates[0] if dates else "",
            "latest": dates[-1] if dates else "",
        },
        "content_index": [
            {
                "slug": item.slug,
                "title": item.base.title,
                "type": item.content_type.value,
                "date": item.base.date,
                "sd_index": item.base.sd_index,
            }
            for item in items
        ],
        "agi_ready": {
            "with_embeddings": sum(1 for item in items if item.base.embedding is not None),
            "with_dialogue": sum(1 for item in items if item.base.dialogue),
            "with_philosophical_insight": sum(
                1 for item in items if item.base.philosophical_insight
            ),
            "total_blocks": sum(len(item.base.blocks) for item in items),
        },
    }


def _distinct(values) -> list[str]:
    # First-seen order, empty values dropped
    return list(dict.fromkeys(v for v in values if v))


def _safe_stem(value: str) -> str:
    return _UNSAFE_STEM_CHARS.sub("-", value or "").strip("-.")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
