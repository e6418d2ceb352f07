"""Tests for the dated backup snapshot."""

from datetime import date
import json

from notion_mirror.core.types import (
    ArticleFields,
    ComicFields,
    Content,
    ContentBase,
    ContentType,
    PodcastFields,
)
from notion_mirror.output.backup import BackupWriter, build_metadata


def _item(page_id, content_type, slug, **base_fields):
    fields = {
        ContentType.ARTICLE: ArticleFields,
        ContentType.COMIC: ComicFields,
        ContentType.PODCAST: PodcastFields,
    }[content_type]()
    return Content(base=ContentBase(id=page_id, content_type=content_type, slug=slug, **base_fields), fields=fields)


def test_duplicate_slugs_get_numeric_suffix(tmp_path):
    items = [
        _item("p1", ContentType.COMIC, "ep1", title="First"),
        _item("p2", ContentType.COMIC, "ep1", title="Second"),
        _item("p3", ContentType.ARTICLE, "ep1"),
    ]
    writer = BackupWriter(tmp_path, run_date=date(2025, 3, 1))

    result = writer.perform_full_backup(items)

    backup_dir = tmp_path / "2025-03-01"
    assert result.backup_dir == backup_dir
    first = json.loads((backup_dir / "comics" / "ep1.json").read_text(encoding="utf-8"))
    second = json.loads((backup_dir / "comics" / "ep1-2.json").read_text(encoding="utf-8"))
    assert first["data"]["title"] == "First"
    assert second["data"]["title"] == "Second"
    assert (backup_dir / "articles" / "ep1.json").exists()
    assert not (backup_dir / "podcasts").exists()
    assert result.duplicates == {"comic:ep1": 2}
    assert len(result.items) == 3


def test_all_content_document(tmp_path):
    items = [_item("p1", ContentType.ARTICLE, "a"), _item("p2", ContentType.PODCAST, "b")]
    writer = BackupWriter(tmp_path, run_date=date(2025, 3, 1))

    path = writer.save_all_content(items)

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert path.name == "all-experiences.json"
    assert doc["version"] == "1.0"
    assert doc["count"] == 2
    assert [entry["slug"] for entry in doc["data"]] == ["a", "b"]
    assert doc["backup_date"]


def test_item_without_slug_is_named_by_id(tmp_path):
    writer = BackupWriter(tmp_path, run_date=date(2025, 3, 1))
    paths, duplicates = writer.save_individual_content([_item("page-7", ContentType.ARTICLE, "")])
    assert [p.name for p in paths] == ["page-7.json"]
    assert duplicates == {}


def test_metadata_summarizes_content():
    items = [
        _item(
            "p1",
            ContentType.COMIC,
            "ep1",
            title="Ep 1",
            date="2025-02-01",
            web_category="Travel",
            project=["Daily Life"],
            concepts=["Stillness", "Water"],
            sd_index=7.5,
            blocks=[{"id": "b1"}, {"id": "b2"}],
        ),
        _item(
            "p2",
            ContentType.ARTICLE,
            "note",
            date="2024-12-24",
            web_category="Travel",
            project=["Art"],
            concepts=["Water"],
            dialogue=[{"speaker": "A", "text": "hi"}],
        ),
        _item("p3", ContentType.ARTICLE, "draft", web_category=""),
    ]

    meta = build_metadata(items)

    assert meta["total_count"] == 3
    assert meta["content_types"] == {"article": 2, "comic": 1, "podcast": 0}
    assert meta["categories"] == ["Travel"]
    assert meta["projects"] == ["Daily Life", "Art"]
    assert meta["all_concepts"] == ["Stillness", "Water"]
    assert meta["date_range"] == {"earliest": "2024-12-24", "latest": "2025-02-01"}
    assert meta["content_index"][0] == {
        "slug": "ep1",
        "title": "Ep 1",
        "type": "comic",
        "date": "2025-02-01",
        "sd_index": 7.5,
    }
    assert meta["agi_ready"] == {
        "with_embeddings": 0,
        "with_dialogue": 1,
        "with_philosophical_insight": 0,
        "total_blocks": 2,
    }
    assert meta["backup_source"] == "Notion API"


def test_metadata_for_empty_set():
    meta = build_metadata([])
    assert meta["total_count"] == 0
    assert meta["date_range"] == {"earliest": "", "latest": ""}
    assert meta["content_index"] == []
