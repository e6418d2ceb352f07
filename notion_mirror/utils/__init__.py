"""
Shared utility functions.

This package contains utility code used across multiple
pipeline stages.
"""

from .logging import (
    JsonlFormatter,
    log_event,
    log_warning,
    setup_logging,
    shorten_url,
)

__all__ = [
    "setup_logging",
    "log_event",
    "log_warning",
    "shorten_url",
    "JsonlFormatter",
]
