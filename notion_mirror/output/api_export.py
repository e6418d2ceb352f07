"""Static JSON API documents served alongside the built site."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any

from ..core.types import Content, SCHEMA_VERSION
from ..utils.logging import log_event, log_warning


LIST_FILENAME = "experiences.json"
ITEM_DIRNAME = "experiences"


def list_document(items: list[Content], generated_at: str | None = None) -> dict[str, Any]:
    return {
        "success": True,
        "count": len(items),
        "schema_version": SCHEMA_VERSION,
        "generated_at": generated_at or _now_iso(),
        "data": [item.to_dict() for item in items],
    }


def item_document(item: Content, generated_at: str | None = None) -> dict[str, Any]:
    return {
        "success": True,
        "schema_version": SCHEMA_VERSION,
        "generated_at": generated_at or _now_iso(),
        "data": item.to_dict(),
    }


def not_found_document(slug: str) -> dict[str, Any]:
    return {"success": False, "error": f'Content with slug "{slug}" not found'}


def write_api_documents(
    items: list[Content],
    out_dir: Path,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """Write the list document and one document per slug.

    Items without a slug are listed but get no per-slug document; on a
    duplicate slug the first item wins.
    """
    out_dir = Path(out_dir)
    item_dir = out_dir / ITEM_DIRNAME
    item_dir.mkdir(parents=True, exist_ok=True)
    generated_at = _now_iso()

    written = [out_dir / LIST_FILENAME]
    _write_json(written[0], list_document(items, generated_at))

    seen: set[str] = set()
    for item in items:
        if not item.slug or "/" in item.slug:
            continue
        if item.slug in seen:
            log_warning(
                logger,
                "Duplicate slug skipped in API output",
                event="api_duplicate_slug",
                slug=item.slug,
                page_id=item.id,
            )
            continue
        seen.add(item.slug)
        path = item_dir / f"{item.slug}.json"
        _write_json(path, item_document(item, generated_at))
        written.append(path)

    log_event(logger, "API documents written", event="api_written", count=len(written), path=str(out_dir))
    return written


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.write_text(f"{json.dumps(payload, ensure_ascii=False, indent=2)}\n", encoding="utf-8")
