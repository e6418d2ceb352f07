"""Tests for page-to-content transformation."""

import pytest

from notion_mirror.core.transform import transform_page
from notion_mirror.core.types import (
    ArticleFields,
    ComicFields,
    Content,
    ContentBase,
    ContentType,
    PodcastFields,
)

from notion_fakes import heading, make_page, media, paragraph


def test_comic_panels_take_narration_from_following_paragraph():
    page = make_page("page-1", content_type="comic", slug="ep1", title="Lake Tanuki")
    blocks = [
        media("img-1", "https://s3.example.com/p1.png", caption="Morning mist"),
        paragraph("par-1", "The lake was still."),
        media("img-2", "https://s3.example.com/p2.png"),
    ]

    content = transform_page(page, blocks)

    assert content.content_type is ContentType.COMIC
    assert isinstance(content.fields, ComicFields)
    panels = content.fields.panels
    assert [p.panel_number for p in panels] == [1, 2]
    assert panels[0].image_url == "https://s3.example.com/p1.png"
    assert panels[0].alt_text == "Morning mist"
    assert panels[0].narration == "The lake was still."
    assert panels[1].narration is None
    assert (panels[0].width, panels[0].height) == (800, 600)
    assert content.fields.episode_number == 1

    data = content.to_dict()
    assert "narration" not in data["panels"][1]
    assert data["panels"][0]["narration"] == "The lake was still."


def test_sd_index_trademark_property_is_read():
    page = make_page("page-2", sd_index=7.5)
    content = transform_page(page, [])
    assert content.base.sd_index == 7.5
    assert content.to_dict()["sdIndex"] == 7.5


def test_unknown_content_type_falls_back_to_article():
    page = make_page("page-3", content_type="video")
    content = transform_page(page, [])
    assert content.content_type is ContentType.ARTICLE
    assert isinstance(content.fields, ArticleFields)

    missing = transform_page(make_page("page-4", content_type=None), [])
    assert missing.content_type is ContentType.ARTICLE


def test_article_excerpt_and_reading_time():
    long_text = " ".join(["word"] * 201)
    blocks = [paragraph("a", long_text), heading("h", "Not counted"), paragraph("b", "")]

    content = transform_page(make_page("page-5"), blocks)

    assert content.fields.excerpt == long_text[:200]
    assert content.fields.reading_time == 2


def test_article_without_blocks_is_empty_but_valid():
    content = transform_page(make_page("page-6"), [])
    assert content.fields.excerpt == ""
    assert content.fields.reading_time == 0


def test_reading_time_never_decreases_with_more_words():
    times = []
    for words in (0, 1, 199, 200, 201, 400, 401, 1000):
        block = paragraph("p", " ".join(["w"] * words))
        times.append(transform_page(make_page("p"), [block]).fields.reading_time)
    assert times == sorted(times)


def test_podcast_audio_and_transcript():
    page = make_page("page-7", content_type="podcast", slug="talk-1")
    blocks = [
        paragraph("p0", "Welcome."),
        media("f1", "https://s3.example.com/talk.m4a", kind="file"),
        heading("h1", "Intro"),
        paragraph("p1", "Hello there."),
        media("f2", "https://s3.example.com/other.mp3", kind="file"),
    ]

    content = transform_page(page, blocks)

    assert isinstance(content.fields, PodcastFields)
    assert content.fields.audio_file.url == "https://s3.example.com/talk.m4a"
    assert content.fields.audio_file.duration == "0:00"
    assert content.fields.transcript == "Welcome.\n\n## Intro\n\nHello there."


def test_podcast_without_file_block_has_empty_audio():
    content = transform_page(make_page("page-8", content_type="podcast"), [paragraph("p", "x")])
    assert content.fields.audio_file.url == ""


def test_base_fields_and_reserved_slots():
    page = make_page(
        "page-9",
        title="Night Market",
        slug="night-market",
        category="Travel",
        projects=["Daily Life"],
        date="2025-02-14T20:00:00.000+09:00",
        hero="https://s3.example.com/hero.jpg",
    )
    blocks = [paragraph("p", "Lanterns.")]

    data = transform_page(page, blocks).to_dict()

    assert data["id"] == "page-9"
    assert data["title"] == "Night Market"
    assert data["date"] == "2025-02-14"
    assert data["webCategory"] == "Travel"
    assert data["project"] == ["Daily Life"]
    assert data["heroImage"] == "https://s3.example.com/hero.jpg"
    assert data["blocks"] == blocks
    assert data["embedding"] is None
    assert data["schema_version"] == "1.0"
    assert data["language"] == "en"
    assert data["last_updated"]
    assert "dialogue" not in data


def test_page_without_properties_degrades_to_defaults():
    content = transform_page({"id": "bare"}, [])
    data = content.to_dict()
    assert data["title"] == ""
    assert data["slug"] == ""
    assert data["sdIndex"] == 0
    assert data["location"] == {"name": ""}
    assert "heroImage" not in data


def test_content_rejects_mismatched_payload():
    base = ContentBase(id="x", content_type=ContentType.COMIC)
    with pytest.raises(TypeError):
        Content(base=base, fields=ArticleFields())
