"""
Remote store access.

This package wraps the Notion REST API and the cursor pagination
used by its list endpoints.
"""

from .client import NotionClient, RemoteStore, RemoteStoreError, status_filter
from .pagination import collect_all, iter_pages

__all__ = [
    "NotionClient",
    "RemoteStore",
    "RemoteStoreError",
    "status_filter",
    "collect_all",
    "iter_pages",
]
