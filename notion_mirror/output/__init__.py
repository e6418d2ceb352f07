"""
Output writers.

This package writes the backup snapshot, the static API documents
and the schema document.
"""

from .api_export import write_api_documents
from .backup import BackupResult, BackupWriter, build_metadata
from .schema import build_schema_document

__all__ = [
    "write_api_documents",
    "BackupResult",
    "BackupWriter",
    "build_metadata",
    "build_schema_document",
]
