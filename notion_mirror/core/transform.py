"""
Transform raw Notion pages into typed content items.

The transform is pure: a page plus its ordered top-level blocks map to
exactly one Content value. Property extraction never fails, so malformed
pages produce degenerate but valid content rather than errors.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import math

from .extractors import (
    block_payload,
    block_text,
    block_type,
    extract_date,
    extract_file_url,
    extract_multi_select,
    extract_number,
    extract_rich_text,
    extract_select,
    extract_title,
    media_url,
    page_property,
    plain_text,
)
from .types import (
    ArticleFields,
    AudioFile,
    ComicFields,
    ComicPanel,
    Content,
    ContentBase,
    ContentType,
    DEFAULT_LANGUAGE,
    Location,
    PodcastFields,
    PodcastStructure,
    RawBlock,
    RawPage,
    SCHEMA_VERSION,
)


EXCERPT_CHARS = 200
WORDS_PER_MINUTE = 200
PANEL_WIDTH = 800
PANEL_HEIGHT = 600
TRANSCRIPT_HEADINGS = ("heading_1", "heading_2", "heading_3")


def transform_to_base(page: RawPage, blocks: list[RawBlock]) -> ContentBase:
    """Build the shared attributes by running every property extractor."""
    page_id = page.get("id", "") if isinstance(page, dict) else ""
    return ContentBase(
        id=page_id if isinstance(page_id, str) else str(page_id),
        content_type=ContentType.parse(extract_select(page_property(page, "Content Type"))),
        title=extract_title(page_property(page, "Title", "Name")),
        slug=extract_rich_text(page_property(page, "Slug")),
        date=extract_date(page_property(page, "Date")),
        location=Location(name=extract_rich_text(page_property(page, "Location"))),
        web_category=extract_select(page_property(page, "Web Category")),
        project=extract_multi_select(page_property(page, "Project")),
        concepts=extract_multi_select(page_property(page, "Concepts")),
        intent_vector=extract_rich_text(page_property(page, "Intent Vector")),
        sd_index=extract_number(page_property(page, "SD-Index™", "SD-Index")),
        hero_image=extract_file_url(page_property(page, "Hero Image")),
        blocks=list(blocks or []),
        embedding=None,
        schema_version=SCHEMA_VERSION,
        last_updated=datetime.now(timezone.utc).isoformat(),
        language=DEFAULT_LANGUAGE,
    )


def transform_article(base: ContentBase, blocks: list[RawBlock]) -> Content:
    paragraphs = [block_text(b) for b in blocks if block_type(b) == "paragraph"]
    excerpt = paragraphs[0][:EXCERPT_CHARS] if paragraphs else ""
    word_count = sum(len(text.split()) for text in paragraphs)
    reading_time = math.ceil(word_count / WORDS_PER_MINUTE)
    return Content(
        base=_retag(base, ContentType.ARTICLE),
        fields=ArticleFields(excerpt=excerpt, reading_time=reading_time),
    )


def transform_comic(base: ContentBase, blocks: list[RawBlock]) -> Content:
    """Turn every image block into a panel; a following paragraph narrates it."""
    panels: list[ComicPanel] = []
    for index, block in enumerate(blocks):
        if block_type(block) != "image":
            continue
        image = block_payload(block)
        narration = None
        if index + 1 < len(blocks) and block_type(blocks[index + 1]) == "paragraph":
            narration = block_text(blocks[index + 1])
        panels.append(
            ComicPanel(
                panel_number=len(panels) + 1,
                image_url=media_url(image) or "",
                width=PANEL_WIDTH,
                height=PANEL_HEIGHT,
                alt_text=plain_text(image.get("caption")),
                narration=narration,
            )
        )
    # Episode number and sensory memory have no source property yet
    return Content(
        base=_retag(base, ContentType.COMIC),
        fields=ComicFields(episode_number=1, panels=panels, sensory_memory=None),
    )


def transform_podcast(base: ContentBase, blocks: list[RawBlock]) -> Content:
    audio_url = ""
    for block in blocks:
        if block_type(block) in ("file", "video"):
            audio_url = media_url(block_payload(block)) or ""
            break

    lines = []
    for block in blocks:
        kind = block_type(block)
        if kind in TRANSCRIPT_HEADINGS:
            lines.append(f"\n## {block_text(block)}\n")
        elif kind == "paragraph":
            lines.append(block_text(block))

    return Content(
        base=_retag(base, ContentType.PODCAST),
        fields=PodcastFields(
            audio_file=AudioFile(url=audio_url, duration="0:00"),
            structure=PodcastStructure(),
            transcript="\n".join(lines),
        ),
    )


def transform_page(page: RawPage, blocks: list[RawBlock]) -> Content:
    """Transform a page and its blocks, dispatching on the content type."""
    blocks = list(blocks or [])
    base = transform_to_base(page, blocks)
    if base.content_type is ContentType.COMIC:
        return transform_comic(base, blocks)
    if base.content_type is ContentType.PODCAST:
        return transform_podcast(base, blocks)
    return transform_article(base, blocks)


def _retag(base: ContentBase, content_type: ContentType) -> ContentBase:
    if base.content_type is content_type:
        return base
    return replace(base, content_type=content_type)
