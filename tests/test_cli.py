"""Tests for the command-line interface."""

import json

from typer.testing import CliRunner

from notion_mirror import cli
from notion_mirror.cli import app
from notion_mirror.runner import SyncReport


runner = CliRunner()


def test_schema_command_writes_file(tmp_path):
    target = tmp_path / "schema" / "content.json"

    result = runner.invoke(app, ["schema", "--output", str(target)])

    assert result.exit_code == 0
    doc = json.loads(target.read_text(encoding="utf-8"))
    assert set(doc["content_types"]) == {"article", "comic", "podcast"}


def test_sync_without_database_id_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    monkeypatch.delenv("NOTION_DATABASE_ID", raising=False)

    result = runner.invoke(app, ["sync", "--output", str(tmp_path / "site"), "--no-progress", "--no-log-file"])

    assert result.exit_code == 1
    assert "database id" in result.output


def test_promote_without_database_id_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    monkeypatch.delenv("NOTION_DATABASE_ID", raising=False)

    result = runner.invoke(app, ["promote", "--to-status", "Archived"])

    assert result.exit_code == 1
    assert "Promotion failed" in result.output


def test_sync_prefers_configured_credentials_over_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NOTION_API_KEY", "env-token")
    monkeypatch.setenv("NOTION_DATABASE_ID", "env-db")
    config = tmp_path / "config.yaml"
    config.write_text(
        "notion:\n  api_key: yaml-token\n  database_id: yaml-db\n",
        encoding="utf-8",
    )
    seen = []

    def fake_run_sync(cfg, output, show_progress=True, console=None):
        seen.append(cfg)
        return SyncReport()

    monkeypatch.setattr(cli, "run_sync", fake_run_sync)

    result = runner.invoke(app, ["sync", "--config", str(config), "--no-progress"])

    assert result.exit_code == 0
    assert seen[0].notion.api_key == "yaml-token"
    assert seen[0].notion.database_id == "yaml-db"
