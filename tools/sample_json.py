#!/usr/bin/env python3
"""Print the first visible content item with its key fields, blocks summarized."""

from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from notion_mirror.config import get_api_key, get_database_id, load_config
from notion_mirror.core.loader import ContentLoader
from notion_mirror.core.types import SCHEMA_VERSION, Content
from notion_mirror.fetch.client import NotionClient, RemoteStoreError


def sample_document(content: Content) -> dict[str, Any]:
    """API-shaped document with the block list replaced by its length."""
    data = content.to_dict()
    data["blocks"] = f"[{len(content.base.blocks)} blocks]"
    data.setdefault("dialogue", [])
    data.setdefault("philosophical_insight", {})
    data.setdefault("emotion_trajectory", {})
    return {
        "success": True,
        "schema_version": SCHEMA_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch visible pages and print the first one as a sample JSON document."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML config file.",
    )
    return parser.parse_args()


async def first_item(cfg) -> Content | None:
    async with NotionClient(cfg.notion, get_api_key(cfg.notion)) as client:
        loader = ContentLoader(client, get_database_id(cfg.notion) or "", statuses=cfg.notion.visible_statuses)
        items = await loader.get_all()
    return items[0] if items else None


def main() -> int:
    args = parse_args()
    load_dotenv()
    cfg = load_config(str(args.config) if args.config else None)

    try:
        content = asyncio.run(first_item(cfg))
    except (RemoteStoreError, ValueError) as exc:
        print(f"Sample generation failed: {exc}")
        return 1

    if content is None:
        print(f"No content found with status in {cfg.notion.visible_statuses}")
        return 0

    print(json.dumps(sample_document(content), ensure_ascii=False, indent=2))
    print(f'Intent Vector: "{content.base.intent_vector}"')
    print(f"SD-Index: {content.base.sd_index}/10")
    print(f"Schema Version: {content.base.schema_version}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
