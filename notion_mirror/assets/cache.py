"""
Local mirroring of remote media referenced by content items.

Notion-hosted file URLs are signed and expire after about an hour. The
asset cache downloads each referenced file once into a flat media
directory and rewrites references to a stable public path such as
``/images/<name>.png``.

Filenames come from a caller-supplied stable id when given (e.g. the
block id), otherwise from the MD5 of the URL, plus an extension sniffed
from the URL path. Lookups go memory map -> file on disk -> download, so
repeated calls for the same URL never download twice and always return
the same path. Download failures are logged and reported as ``None``;
callers keep the original URL in that case.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import hashlib
import logging
import os
from pathlib import Path
import re
from typing import Awaitable, Callable
from urllib.parse import urlparse

import httpx

from ..core.extractors import block_payload, block_type, media_url
from ..core.types import ComicFields, Content, PodcastFields, RawBlock
from ..utils.logging import log_event, log_warning, shorten_url


MEDIA_BLOCK_TYPES = ("image", "audio", "video", "file")
KNOWN_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|m4a|mp3)$", re.IGNORECASE)
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

ChildrenLoader = Callable[[str], Awaitable[list[RawBlock]]]


@dataclass
class AssetStats:
    """Counters collected while caching assets.

    Attributes:
        memory_hits: Served from the in-memory URL map
        disk_hits: Target file already existed on disk
        downloaded: Files downloaded and written
        failed: Downloads that failed (original URL kept)
    """

    memory_hits: int = 0
    disk_hits: int = 0
    downloaded: int = 0
    failed: int = 0


class AssetCache:
    """Content-addressed download cache for remote media URLs."""

    def __init__(
        self,
        media_dir: Path,
        public_prefix: str = "/images/",
        default_extension: str = ".jpg",
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ):
        self.media_dir = Path(media_dir)
        self.public_prefix = public_prefix if public_prefix.endswith("/") else public_prefix + "/"
        self.default_extension = default_extension
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.logger = logger
        self.stats = AssetStats()
        self._url_map: dict[str, str] = {}
        self._inflight: dict[str, asyncio.Task[bool]] = {}

    @property
    def cached_count(self) -> int:
        """Number of distinct URLs resolved to a local path."""
        return len(self._url_map)

    def get_stats(self) -> dict[str, int]:
        return {
            "total": self.cached_count,
            "memory_hits": self.stats.memory_hits,
            "disk_hits": self.stats.disk_hits,
            "downloaded": self.stats.downloaded,
            "failed": self.stats.failed,
        }

    def is_local(self, url: str) -> bool:
        return url.startswith(self.public_prefix)

    def filename_for(self, url: str, stable_id: str | None = None) -> str:
        """Derive the cache filename for a URL.

        Example:
            >>> cache.filename_for("https://s3.example.com/a/Panel.PNG?X-Amz=1", "blk-1")
            'blk-1.png'
        """
        name = _UNSAFE_NAME_CHARS.sub("-", stable_id).strip("-") if stable_id else ""
        if not name:
            name = hashlib.md5(url.encode("utf-8")).hexdigest()
        try:
            match = KNOWN_EXTENSIONS.search(urlparse(url).path)
        except ValueError:
            match = None
        ext = match.group(0).lower() if match else self.default_extension
        return f"{name}{ext}"

    async def cache_image(self, url: str | None, stable_id: str | None = None) -> str | None:
        """Return the local public path for ``url``, downloading it if needed.

        Local paths are returned unchanged. Returns None for an empty URL or
        when the download fails.
        """
        if not url:
            return None
        if self.is_local(url):
            return url

        cached = self._url_map.get(url)
        if cached is not None:
            self.stats.memory_hits += 1
            return cached

        filename = self.filename_for(url, stable_id)
        task = self._inflight.get(filename)
        if task is None:
            task = asyncio.create_task(self._materialize(url, filename))
            self._inflight[filename] = task
            task.add_done_callback(lambda _t, key=filename: self._inflight.pop(key, None))

        if not await task:
            return None
        public_path = f"{self.public_prefix}{filename}"
        self._url_map[url] = public_path
        return public_path

    async def cache_hero_image(self, url: str | None, stable_id: str | None = None) -> str | None:
        """Cache a hero image, keeping the original URL when caching fails."""
        if not url:
            return url
        cached = await self.cache_image(url, stable_id)
        return cached or url

    async def cache_block_images(
        self,
        blocks: list[RawBlock],
        load_children: ChildrenLoader | None = None,
    ) -> list[RawBlock]:
        """Return a copy of the block tree with media URLs rewritten.

        Media blocks (image, audio, video, file) are keyed by their block id.
        Declared children are walked regardless of ``has_children``; when
        ``load_children`` is given, children that exist remotely but were not
        loaded are fetched and attached first. The input tree is not mutated.
        """
        if not blocks:
            return []
        results = await asyncio.gather(
            *(self._cache_block(block, load_children) for block in blocks)
        )
        return list(results)

    async def cache_content(
        self,
        content: Content,
        load_children: ChildrenLoader | None = None,
    ) -> Content:
        """Return a copy of ``content`` with every media reference cached."""
        base = content.base
        hero = await self.cache_hero_image(
            base.hero_image, f"{base.id}-hero" if base.id else None
        )
        blocks = await self.cache_block_images(base.blocks, load_children)
        new_base = replace(base, hero_image=hero, blocks=blocks)

        fields = content.fields
        if isinstance(fields, ComicFields):
            panels = []
            for panel in fields.panels:
                cached = await self.cache_image(panel.image_url)
                panels.append(replace(panel, image_url=cached) if cached else panel)
            fields = replace(fields, panels=panels)
        elif isinstance(fields, PodcastFields):
            cached = await self.cache_image(fields.audio_file.url)
            if cached:
                fields = replace(fields, audio_file=replace(fields.audio_file, url=cached))

        return Content(base=new_base, fields=fields)

    async def _cache_block(self, block: RawBlock, load_children: ChildrenLoader | None) -> RawBlock:
        if not isinstance(block, dict):
            return block
        updated = dict(block)
        kind = block_type(block)
        payload = block_payload(block)

        if kind in MEDIA_BLOCK_TYPES:
            url = media_url(payload)
            if url:
                block_id = block.get("id")
                cached = await self.cache_image(url, block_id if isinstance(block_id, str) else None)
                if cached:
                    payload = {k: v for k, v in payload.items() if k not in ("external", "file")}
                    payload["type"] = "file"
                    payload["file"] = {"url": cached}
                    updated[kind] = payload

        children, in_payload = _declared_children(block)
        if children is None and load_children is not None and block.get("has_children"):
            block_id = block.get("id")
            if isinstance(block_id, str) and block_id:
                children = await load_children(block_id)
                in_payload = bool(kind) and isinstance(block.get(kind), dict)

        if children is not None:
            cached_children = await self.cache_block_images(children, load_children)
            if in_payload:
                updated[kind] = {**updated[kind], "children": cached_children}
            else:
                updated["children"] = cached_children
        return updated

    async def _materialize(self, url: str, filename: str) -> bool:
        target = self.media_dir / filename
        if await asyncio.to_thread(target.exists):
            self.stats.disk_hits += 1
            return True

        log_event(
            self.logger,
            "Asset download start",
            event="asset_download_start",
            url=shorten_url(url),
            asset_file=filename,
        )
        try:
            data = await self._download(url)
            await asyncio.to_thread(_write_atomic, target, data)
        except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as exc:
            self.stats.failed += 1
            log_warning(
                self.logger,
                "Asset download failed",
                event="asset_download_failed",
                url=shorten_url(url),
                asset_file=filename,
                error=f"{type(exc).__name__}: {exc}",
            )
            return False

        self.stats.downloaded += 1
        log_event(
            self.logger,
            "Asset cached",
            event="asset_cached",
            asset_file=filename,
            size=len(data),
        )
        return True

    async def _download(self, url: str) -> bytes:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content


def _declared_children(block: RawBlock) -> tuple[list[RawBlock] | None, bool]:
    """Children loaded with the block: under its payload or at top level."""
    payload = block_payload(block)
    if isinstance(payload.get("children"), list):
        return payload["children"], True
    if isinstance(block.get("children"), list):
        return block["children"], False
    return None, False


def _write_atomic(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.part")
    tmp.write_bytes(data)
    os.replace(tmp, target)

