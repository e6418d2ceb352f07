"""
Hand-maintained schema document for the content model.

Field names here are the JSON keys produced by ``Content.to_dict()``;
tests check that every emitted key is described.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..core.types import DEFAULT_LANGUAGE, SCHEMA_VERSION, ContentType


def _string(**extra: Any) -> dict[str, Any]:
    return {"type": "string", **extra}


def _number(**extra: Any) -> dict[str, Any]:
    return {"type": "number", **extra}


def _string_list(**extra: Any) -> dict[str, Any]:
    return {"type": "array", "items": "string", **extra}


BASE_FIELDS: dict[str, Any] = {
    "id": _string(required=True, description="Notion page ID"),
    "contentType": _string(required=True, enum=[t.value for t in ContentType]),
    "title": _string(required=True),
    "date": _string(required=True, format="ISO-8601 date (YYYY-MM-DD)"),
    "slug": _string(required=True, description="URL-safe identifier"),
    "location": {
        "type": "object",
        "required": True,
        "fields": {
            "name": _string(required=True),
            "coordinates": {
                "type": "object",
                "fields": {"lat": _number(), "lng": _number()},
            },
        },
    },
    "webCategory": _string(required=True),
    "project": _string_list(required=True),
    "concepts": _string_list(required=True),
    "intentVector": _string(required=True, description="Semantic purpose"),
    "sdIndex": _number(required=True, description="Symbiotic Depth Index (0-10)"),
    "heroImage": _string(format="url or local path"),
    "blocks": {"type": "array", "required": True, "description": "Raw Notion blocks"},
    "dialogue": {
        "type": "array",
        "items": {"speaker": _string(), "text": _string()},
        "description": "Reserved",
    },
    "philosophical_insight": {
        "type": "object",
        "fields": {"metaphor": _string(), "reflection": _string()},
        "description": "Reserved",
    },
    "emotion_trajectory": {
        "type": "object",
        "fields": {
            "start": _string(description="Starting emotion"),
            "end": _string(description="Ending emotion"),
        },
        "description": "Reserved",
    },
    "embedding": {
        "type": "array",
        "items": "number",
        "nullable": True,
        "required": True,
        "description": "Vector embeddings (reserved, always null)",
    },
    "schema_version": _string(required=True),
    "last_updated": _string(required=True, format="ISO-8601"),
    "language": _string(required=True, enum=["zh", "en"], default=DEFAULT_LANGUAGE),
}

ARTICLE_FIELDS: dict[str, Any] = {
    "excerpt": _string(required=True, description="First 200 characters of the first paragraph"),
    "readingTime": _number(required=True, description="Minutes at 200 words per minute"),
}

COMIC_FIELDS: dict[str, Any] = {
    "episodeNumber": _number(required=True),
    "panels": {
        "type": "array",
        "required": True,
        "items": {
            "panelNumber": _number(required=True),
            "imageUrl": _string(required=True, format="url or local path"),
            "width": _number(required=True, default=800),
            "height": _number(required=True, default=600),
            "altText": _string(required=True),
            "narration": _string(),
        },
    },
    "sensoryMemory": {
        "type": "object",
        "fields": {
            "sight": _string_list(),
            "scent": _string_list(),
            "taste": _string_list(),
            "touch": _string_list(),
            "sound": _string_list(),
        },
    },
}

PODCAST_FIELDS: dict[str, Any] = {
    "audioFile": {
        "type": "object",
        "required": True,
        "fields": {
            "url": _string(required=True, format="url or local path"),
            "duration": _string(required=True, format="MM:SS"),
        },
    },
    "structure": {
        "type": "object",
        "required": True,
        "fields": {
            "intro": {"timestamp": _string(), "summary": _string()},
            "mainContent": {"timestamp": _string(), "topics": _string_list()},
            "outro": {"timestamp": _string(), "summary": _string()},
        },
    },
    "transcript": _string(required=True, description="Full text transcript"),
}

VARIANT_FIELDS: dict[ContentType, dict[str, Any]] = {
    ContentType.ARTICLE: ARTICLE_FIELDS,
    ContentType.COMIC: COMIC_FIELDS,
    ContentType.PODCAST: PODCAST_FIELDS,
}

_DESCRIPTIONS = {
    ContentType.ARTICLE: "Long-form written content",
    ContentType.COMIC: "Vertical webtoon format",
    ContentType.PODCAST: "Audio content",
}


def build_schema_document(generated_at: str | None = None) -> dict[str, Any]:
    return {
        "version": SCHEMA_VERSION,
        "generated_at": generated_at or datetime.now(timezone.utc).isoformat(),
        "description": "AGI-first content schema",
        "base_fields": BASE_FIELDS,
        "content_types": {
            content_type.value: {
                "type": content_type.value,
                "description": _DESCRIPTIONS[content_type],
                "extends": "base",
                "additional_fields": VARIANT_FIELDS[content_type],
            }
            for content_type in ContentType
        },
    }


def field_names(content_type: ContentType | str) -> set[str]:
    """Every top-level key a content item of this type may carry."""
    return set(BASE_FIELDS) | set(VARIANT_FIELDS[ContentType(content_type)])
