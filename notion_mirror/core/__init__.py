"""
Core content model and transformation.

This package contains the content types and the pure page-to-content
transform. The loader lives in ``notion_mirror.core.loader`` and is
imported from there, since it depends on the fetch and asset layers.
"""

from .types import (
    ArticleFields,
    ComicFields,
    ComicPanel,
    Content,
    ContentBase,
    ContentType,
    PodcastFields,
)
from .transform import transform_page

__all__ = [
    "ArticleFields",
    "ComicFields",
    "ComicPanel",
    "Content",
    "ContentBase",
    "ContentType",
    "PodcastFields",
    "transform_page",
]
