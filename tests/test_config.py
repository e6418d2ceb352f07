"""Tests for YAML config loading."""

from notion_mirror.config import AppConfig, get_api_key, get_database_id, load_config


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg.notion.visible_statuses == ["Ready for Web", "Published"]
    assert cfg.assets.public_prefix == "/images/"
    assert cfg.backup.base_dir == "data/backup"
    assert cfg.publish.promote_after_sync is False


def test_partial_file_overrides_and_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "notion:\n"
        "  page_size: 25\n"
        "  bogus: 1\n"
        "publish:\n"
        "  promote_after_sync: true\n"
        "unknown_section:\n"
        "  a: b\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.notion.page_size == 25
    assert cfg.notion.base_url == "https://api.notion.com/v1"
    assert cfg.publish.promote_after_sync is True
    assert cfg.assets.enabled is True


def test_loading_does_not_share_default_lists(tmp_path):
    cfg = load_config(None)
    cfg.notion.visible_statuses.append("Draft")
    assert load_config(None).notion.visible_statuses == ["Ready for Web", "Published"]


def test_credentials_prefer_inline_values(monkeypatch):
    monkeypatch.setenv("NOTION_API_KEY", "env-token")
    monkeypatch.setenv("NOTION_DATABASE_ID", "env-db")
    cfg = AppConfig()

    assert get_api_key(cfg.notion) == "env-token"
    assert get_database_id(cfg.notion) == "env-db"

    cfg.notion.api_key = "inline-token"
    cfg.notion.database_id = "inline-db"
    assert get_api_key(cfg.notion) == "inline-token"
    assert get_database_id(cfg.notion) == "inline-db"


def test_missing_credentials(monkeypatch):
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    monkeypatch.delenv("NOTION_DATABASE_ID", raising=False)
    cfg = AppConfig()
    assert get_api_key(cfg.notion) is None
    assert get_database_id(cfg.notion) is None
