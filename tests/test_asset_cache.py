"""Tests for local media mirroring."""

import asyncio
import copy
import hashlib

import httpx

from notion_mirror.assets.cache import AssetCache
from notion_mirror.core.transform import transform_page

from notion_fakes import make_page, media, paragraph


def _transport(requests, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        return httpx.Response(status_code, content=b"image-bytes")

    return httpx.MockTransport(handler)


def test_same_url_downloads_once(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    url = "https://s3.example.com/a/panel.PNG?X-Amz-Signature=abc"

    async def run():
        first = await cache.cache_image(url, "blk-1")
        concurrent = await asyncio.gather(cache.cache_image(url, "blk-1"), cache.cache_image(url, "blk-1"))
        return first, concurrent

    first, concurrent = asyncio.run(run())

    assert first == "/images/blk-1.png"
    assert concurrent == [first, first]
    assert len(requests) == 1
    assert (tmp_path / "blk-1.png").read_bytes() == b"image-bytes"
    assert cache.get_stats()["downloaded"] == 1
    assert cache.get_stats()["memory_hits"] == 2


def test_concurrent_first_requests_are_coalesced(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    url = "https://s3.example.com/a/panel.png"

    async def run():
        return await asyncio.gather(*(cache.cache_image(url, "blk-9") for _ in range(3)))

    paths = asyncio.run(run())

    assert paths == ["/images/blk-9.png"] * 3
    assert len(requests) == 1


def test_existing_file_is_not_downloaded(tmp_path):
    requests = []
    (tmp_path / "blk-2.jpg").write_bytes(b"old")
    cache = AssetCache(tmp_path, transport=_transport(requests))

    path = asyncio.run(cache.cache_image("https://s3.example.com/x.jpg", "blk-2"))

    assert path == "/images/blk-2.jpg"
    assert requests == []
    assert cache.get_stats()["disk_hits"] == 1
    assert (tmp_path / "blk-2.jpg").read_bytes() == b"old"


def test_failed_download_returns_none_and_keeps_hero_url(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests, status_code=403))
    url = "https://s3.example.com/expired.png"

    assert asyncio.run(cache.cache_image(url, "blk-3")) is None
    assert asyncio.run(cache.cache_hero_image(url, "hero")) == url
    assert cache.get_stats()["failed"] == 2
    assert cache.cached_count == 0
    assert list(tmp_path.iterdir()) == []


def test_transport_error_is_reported_as_failure(tmp_path):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    cache = AssetCache(tmp_path, transport=httpx.MockTransport(handler))

    assert asyncio.run(cache.cache_image("https://s3.example.com/y.png")) is None
    assert cache.stats.failed == 1


def test_local_and_empty_urls_pass_through(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))

    assert asyncio.run(cache.cache_image("/images/already.png")) == "/images/already.png"
    assert asyncio.run(cache.cache_image("")) is None
    assert asyncio.run(cache.cache_hero_image(None)) is None
    assert requests == []


def test_filename_derivation(tmp_path):
    cache = AssetCache(tmp_path)
    url = "https://s3.example.com/path/noext"

    assert cache.filename_for("https://s3.example.com/a/b.JPEG?sig=1", "blk 1/2") == "blk-1-2.jpeg"
    assert cache.filename_for(url) == hashlib.md5(url.encode("utf-8")).hexdigest() + ".jpg"
    assert cache.filename_for("https://x.example.com/song.mp3", "a").endswith(".mp3")


def test_block_tree_rewrite_does_not_mutate_input(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    nested = media("img-nested", "https://cdn.example.com/n.png", hosted="external")
    blocks = [
        media("img-top", "https://s3.example.com/t.png", caption="top"),
        {
            "id": "toggle-1",
            "type": "toggle",
            "has_children": True,
            "toggle": {"rich_text": [], "children": [nested]},
        },
        paragraph("p1", "text"),
    ]
    original = copy.deepcopy(blocks)

    result = asyncio.run(cache.cache_block_images(blocks))

    assert blocks == original
    top = result[0]["image"]
    assert top == {"type": "file", "file": {"url": "/images/img-top.png"}, "caption": original[0]["image"]["caption"]}
    inner = result[1]["toggle"]["children"][0]["image"]
    assert inner["type"] == "file"
    assert inner["file"] == {"url": "/images/img-nested.png"}
    assert "external" not in inner
    assert result[2] == original[2]
    assert len(requests) == 2


def test_unloaded_children_are_fetched_through_loader(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    calls = []

    async def load_children(block_id):
        calls.append(block_id)
        return [media("img-child", "https://s3.example.com/c.gif")]

    blocks = [{"id": "col-1", "type": "column", "has_children": True, "column": {}}]

    result = asyncio.run(cache.cache_block_images(blocks, load_children))

    assert calls == ["col-1"]
    assert result[0]["column"]["children"][0]["image"]["file"]["url"] == "/images/img-child.gif"
    assert "children" not in blocks[0]["column"]


def test_cache_content_rewrites_hero_panels_and_audio(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    comic = transform_page(
        make_page("page-1", content_type="comic", hero="https://s3.example.com/hero.png"),
        [media("img-1", "https://s3.example.com/p1.png"), paragraph("p", "narration")],
    )
    podcast = transform_page(
        make_page("page-2", content_type="podcast"),
        [media("file-1", "https://s3.example.com/talk.m4a", kind="file")],
    )

    cached_comic = asyncio.run(cache.cache_content(comic))
    cached_podcast = asyncio.run(cache.cache_content(podcast))

    assert cached_comic.base.hero_image == "/images/page-1-hero.png"
    assert cached_comic.fields.panels[0].image_url == "/images/img-1.png"
    assert cached_comic.fields.panels[0].narration == "narration"
    assert cached_podcast.fields.audio_file.url == "/images/file-1.m4a"
    assert comic.fields.panels[0].image_url == "https://s3.example.com/p1.png"
    # Panel and block share a URL, so the panel reuses the block download
    assert len(requests) == 3


def test_malformed_url_keeps_original_and_does_not_raise(tmp_path):
    requests = []
    cache = AssetCache(tmp_path, transport=_transport(requests))
    bad_url = "https://[bad/x.png"
    blocks = [{"id": "b1", "type": "image", "image": {"type": "external", "external": {"url": bad_url}}}]

    result = asyncio.run(cache.cache_block_images(blocks))

    assert result[0]["image"] == {"type": "external", "external": {"url": bad_url}}
    assert cache.filename_for(bad_url, "b1") == "b1.jpg"
    assert cache.get_stats()["failed"] == 1
    assert requests == []
