"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- NotionConfig: Remote store (Notion REST API) settings
- AssetConfig: Media download and local mirroring settings
- BackupConfig: Backup snapshot and static API output settings
- PublishConfig: Post-publish status promotion settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class NotionConfig:
    """Configuration for the Notion remote store.

    Attributes:
        api_key_env: Environment variable holding the integration token
        api_key: Optional inline token (overrides env var)
        database_id_env: Environment variable holding the database id
        database_id: Optional inline database id (overrides env var)
        base_url: Base URL of the Notion REST API
        notion_version: Value sent in the Notion-Version header
        timeout_seconds: HTTP request timeout
        retries: Number of retry attempts for transient failures
        page_size: Page size requested from paginated endpoints (max 100)
        visible_statuses: Status values considered visible for web publishing
    """

    api_key_env: str = "NOTION_API_KEY"
    api_key: str | None = None
    database_id_env: str = "NOTION_DATABASE_ID"
    database_id: str | None = None
    base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    timeout_seconds: float = 30.0
    retries: int = 2
    page_size: int = 100
    visible_statuses: list[str] = field(default_factory=lambda: ["Ready for Web", "Published"])


@dataclass
class AssetConfig:
    """Configuration for the asset cache.

    Attributes:
        enabled: Whether remote media is mirrored locally during a sync
        media_dir: Directory where downloaded media is written
        public_prefix: URL prefix under which media_dir is served
        default_extension: Extension used when none can be sniffed from the URL
        timeout_seconds: Download timeout
        expand_children: Fetch nested block children that were not loaded yet
    """

    enabled: bool = True
    media_dir: str = "public/images"
    public_prefix: str = "/images/"
    default_extension: str = ".jpg"
    timeout_seconds: float = 60.0
    expand_children: bool = True


@dataclass
class BackupConfig:
    """Configuration for backup and static API output.

    Attributes:
        enabled: Whether to write the backup snapshot
        base_dir: Root directory for dated backup folders
        api_dir: Directory for static API JSON documents ("" disables)
    """

    enabled: bool = True
    base_dir: str = "data/backup"
    api_dir: str = "public/api"


@dataclass
class PublishConfig:
    """Configuration for post-publish status promotion.

    Attributes:
        promote_after_sync: Promote pages once backup output is written
        from_status: Status of pages waiting to be published
        to_status: Status assigned after publishing
    """

    promote_after_sync: bool = False
    from_status: str = "Ready for Web"
    to_status: str = "Published"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "sync.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    notion: NotionConfig = field(default_factory=NotionConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return _fromdict(_asdict(DEFAULT_CONFIG))

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(DEFAULT_CONFIG, raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "notion": {
            "api_key_env": cfg.notion.api_key_env,
            "api_key": cfg.notion.api_key,
            "database_id_env": cfg.notion.database_id_env,
            "database_id": cfg.notion.database_id,
            "base_url": cfg.notion.base_url,
            "notion_version": cfg.notion.notion_version,
            "timeout_seconds": cfg.notion.timeout_seconds,
            "retries": cfg.notion.retries,
            "page_size": cfg.notion.page_size,
            "visible_statuses": list(cfg.notion.visible_statuses),
        },
        "assets": {
            "enabled": cfg.assets.enabled,
            "media_dir": cfg.assets.media_dir,
            "public_prefix": cfg.assets.public_prefix,
            "default_extension": cfg.assets.default_extension,
            "timeout_seconds": cfg.assets.timeout_seconds,
            "expand_children": cfg.assets.expand_children,
        },
        "backup": {
            "enabled": cfg.backup.enabled,
            "base_dir": cfg.backup.base_dir,
            "api_dir": cfg.backup.api_dir,
        },
        "publish": {
            "promote_after_sync": cfg.publish.promote_after_sync,
            "from_status": cfg.publish.from_status,
            "to_status": cfg.publish.to_status,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        notion=NotionConfig(**data["notion"]),
        assets=AssetConfig(**data["assets"]),
        backup=BackupConfig(**data["backup"]),
        publish=PublishConfig(**data["publish"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_api_key(cfg: NotionConfig) -> str | None:
    """Get Notion token from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_database_id(cfg: NotionConfig) -> str | None:
    """Get Notion database id from inline config or environment variable."""
    if cfg.database_id:
        return cfg.database_id
    return os.getenv(cfg.database_id_env)
