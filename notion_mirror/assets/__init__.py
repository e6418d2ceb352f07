"""
Asset mirroring.

Downloads remote media referenced by content items and rewrites
references to stable local paths.
"""

from .cache import AssetCache, AssetStats, MEDIA_BLOCK_TYPES

__all__ = ["AssetCache", "AssetStats", "MEDIA_BLOCK_TYPES"]
