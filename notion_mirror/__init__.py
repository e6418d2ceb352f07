"""
Notion content mirror - typed content snapshots from a Notion database.

This package reads pages from a Notion database, turns them into typed
content items (article, comic, podcast), mirrors their expiring media
locally and writes a dated JSON backup plus static API documents.

Main entry point is the CLI via `notion-mirror sync` command.

Example:
    $ notion-mirror sync -o site/ --promote
"""

__all__ = ["__version__", "Content", "ContentType", "transform_page"]
__version__ = "0.1.0"

from .core.transform import transform_page
from .core.types import Content, ContentType
