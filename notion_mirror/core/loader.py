"""
Content loader: paginated retrieval, transformation and lookups.

The loader pages through the configured Notion database (pages whose
status is one of the visible statuses), fetches each page's top-level
blocks, transforms them into Content and optionally mirrors media
through an AssetCache. Memoization lives in an explicit ``RunCache``
owned by the caller, so a fresh cache means a cold run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import re

from ..assets.cache import AssetCache
from ..fetch.client import RemoteStore, status_filter
from ..fetch.pagination import collect_all
from ..utils.logging import log_event
from .extractors import extract_multi_select, extract_rich_text, extract_select, page_property
from .transform import transform_page
from .types import Content, ContentType, RawBlock, RawPage


DEFAULT_VISIBLE_STATUSES = ("Ready for Web", "Published")

_WHITESPACE = re.compile(r"\s+")


@dataclass
class RunCache:
    """Memoization state for one pipeline run.

    Attributes:
        pages: Visible raw pages, or None until first listed
        contents: Transformed content keyed by (page id, last edited time)
    """

    pages: list[RawPage] | None = None
    contents: dict[tuple[str, str], Content] = field(default_factory=dict)

    def reset(self) -> None:
        self.pages = None
        self.contents.clear()


def normalize_project(name: str) -> str:
    """Lower-case a project tag and collapse whitespace runs to ``-``."""
    return _WHITESPACE.sub("-", name.strip().lower())


class ContentLoader:
    """Loads visible pages from the remote store as transformed Content."""

    def __init__(
        self,
        client: RemoteStore,
        database_id: str,
        statuses: list[str] | tuple[str, ...] = DEFAULT_VISIBLE_STATUSES,
        cache: RunCache | None = None,
        asset_cache: AssetCache | None = None,
        expand_children: bool = True,
        logger: logging.Logger | None = None,
    ):
        if not database_id:
            raise ValueError("Missing Notion database id")
        self.client = client
        self.database_id = database_id
        self.statuses = list(statuses)
        self.cache = cache if cache is not None else RunCache()
        self.asset_cache = asset_cache
        self.expand_children = expand_children
        self.logger = logger

    async def fetch_all_pages(self) -> list[RawPage]:
        """List every visible page, following cursors until exhausted."""
        if self.cache.pages is not None:
            return self.cache.pages

        query = status_filter(self.statuses)
        pages = await collect_all(
            lambda cursor: self.client.query_database(
                self.database_id, filter=query, start_cursor=cursor
            )
        )
        log_event(
            self.logger,
            "Pages listed",
            event="pages_listed",
            count=len(pages),
            statuses=self.statuses,
        )
        self.cache.pages = pages
        return pages

    async def fetch_page_blocks(self, page_id: str) -> list[RawBlock]:
        """List a page's (or block's) direct children; nested levels are not expanded."""
        return await collect_all(
            lambda cursor: self.client.list_block_children(page_id, start_cursor=cursor)
        )

    async def transform_page(self, page: RawPage) -> Content:
        key = (str(page.get("id", "")), str(page.get("last_edited_time", "")))
        cached = self.cache.contents.get(key)
        if cached is not None:
            return cached

        blocks = await self.fetch_page_blocks(key[0])
        content = transform_page(page, blocks)
        if self.asset_cache is not None:
            loader = self.fetch_page_blocks if self.expand_children else None
            content = await self.asset_cache.cache_content(content, load_children=loader)

        log_event(
            self.logger,
            "Page transformed",
            event="page_transformed",
            page_id=content.id,
            slug=content.slug,
            content_type=content.content_type.value,
            blocks=len(blocks),
        )
        self.cache.contents[key] = content
        return content

    async def get_all(self, content_type: ContentType | str | None = None) -> list[Content]:
        """Every visible item, optionally restricted to one content type."""
        pages = await self.fetch_all_pages()
        contents = await self._transform_many(pages)
        if content_type is None:
            return contents
        wanted = ContentType(content_type)
        return [c for c in contents if c.content_type is wanted]

    async def get_by_slug(self, slug: str) -> Content | None:
        """Exact match on the raw Slug property; None when no page matches."""
        pages = await self.fetch_all_pages()
        for page in pages:
            if extract_rich_text(page_property(page, "Slug")) == slug:
                return await self.transform_page(page)
        return None

    async def get_by_project(self, project: str) -> list[Content]:
        wanted = project.lower()
        pages = await self.fetch_all_pages()
        matching = [
            page
            for page in pages
            if wanted in {normalize_project(p) for p in extract_multi_select(page_property(page, "Project"))}
        ]
        return await self._transform_many(matching)

    async def get_by_category(self, category: str) -> list[Content]:
        wanted = category.lower()
        pages = await self.fetch_all_pages()
        matching = [
            page
            for page in pages
            if extract_select(page_property(page, "Web Category")).lower() == wanted
        ]
        return await self._transform_many(matching)

    async def _transform_many(self, pages: list[RawPage]) -> list[Content]:
        # gather() preserves input order even though transforms interleave
        return list(await asyncio.gather(*(self.transform_page(page) for page in pages)))
