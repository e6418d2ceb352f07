"""
Core data types for the content mirror.

This module defines the content model produced by the transformer:
- ContentType: closed set of content variants (the discriminator)
- ContentBase: attributes shared by every variant
- ArticleFields / ComicFields / PodcastFields: variant-specific payloads
- Content: a base plus exactly one payload, tagged by content type

Raw Notion pages and blocks are kept as plain dicts (``RawPage`` and
``RawBlock``); they are read-only inputs and never modelled further.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


RawPage = dict[str, Any]
RawBlock = dict[str, Any]

SCHEMA_VERSION = "1.0"
DEFAULT_LANGUAGE = "en"


class ContentType(str, Enum):
    """Discriminator selecting which variant payload a content item carries."""

    ARTICLE = "article"
    COMIC = "comic"
    PODCAST = "podcast"

    @classmethod
    def parse(cls, value: Any) -> "ContentType":
        """Map a raw select value to a content type, falling back to article."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.ARTICLE


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class Location:
    """Place name with optional coordinates (e.g. "Lake Tanuki, Shizuoka")."""

    name: str = ""
    coordinates: Coordinates | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.coordinates is not None:
            data["coordinates"] = {"lat": self.coordinates.lat, "lng": self.coordinates.lng}
        return data


@dataclass(frozen=True)
class ContentBase:
    """Attributes shared by all content variants.

    Attributes:
        id: Source page identifier
        content_type: Raw discriminator resolved to a ContentType
        title: Page title
        slug: Lookup and file-naming key
        date: Calendar date (YYYY-MM-DD) or empty string
        location: Place name with optional coordinates
        web_category: Web Category select value
        project: Project tags
        concepts: Concept tags
        intent_vector: Free-text semantic label
        sd_index: Symbiotic depth score, 0-10 by convention
        hero_image: Hero image URL, or local path once cached
        blocks: Top-level Notion blocks, verbatim
        dialogue: Reserved, never populated by the transformer
        philosophical_insight: Reserved, never populated by the transformer
        emotion_trajectory: Reserved, never populated by the transformer
        embedding: Reserved vector slot, always None
        schema_version: Version of this content schema
        last_updated: ISO-8601 timestamp of the transform
        language: Content language
    """

    id: str
    content_type: ContentType
    title: str = ""
    slug: str = ""
    date: str = ""
    location: Location = field(default_factory=Location)
    web_category: str = ""
    project: list[str] = field(default_factory=list)
    concepts: list[str] = field(default_factory=list)
    intent_vector: str = ""
    sd_index: float = 0
    hero_image: str | None = None
    blocks: list[RawBlock] = field(default_factory=list)
    dialogue: list[dict[str, str]] | None = None
    philosophical_insight: dict[str, str] | None = None
    emotion_trajectory: dict[str, str] | None = None
    embedding: list[float] | None = None
    schema_version: str = SCHEMA_VERSION
    last_updated: str = ""
    language: str = DEFAULT_LANGUAGE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "contentType": self.content_type.value,
            "title": self.title,
            "date": self.date,
            "slug": self.slug,
            "location": self.location.to_dict(),
            "webCategory": self.web_category,
            "project": list(self.project),
            "concepts": list(self.concepts),
            "intentVector": self.intent_vector,
            "sdIndex": self.sd_index,
        }
        if self.hero_image is not None:
            data["heroImage"] = self.hero_image
        data["blocks"] = self.blocks
        if self.dialogue is not None:
            data["dialogue"] = self.dialogue
        if self.philosophical_insight is not None:
            data["philosophical_insight"] = self.philosophical_insight
        if self.emotion_trajectory is not None:
            data["emotion_trajectory"] = self.emotion_trajectory
        data["embedding"] = self.embedding
        data["schema_version"] = self.schema_version
        data["last_updated"] = self.last_updated
        data["language"] = self.language
        return data


@dataclass(frozen=True)
class ArticleFields:
    excerpt: str = ""
    reading_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"excerpt": self.excerpt, "readingTime": self.reading_time}


@dataclass(frozen=True)
class ComicPanel:
    """One comic panel, built from an image block.

    Height is a fixed placeholder until image metadata is available.
    """

    panel_number: int
    image_url: str
    width: int = 800
    height: int = 600
    alt_text: str = ""
    narration: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "panelNumber": self.panel_number,
            "imageUrl": self.image_url,
            "width": self.width,
            "height": self.height,
            "altText": self.alt_text,
        }
        if self.narration is not None:
            data["narration"] = self.narration
        return data


@dataclass(frozen=True)
class SensoryMemory:
    sight: list[str] = field(default_factory=list)
    scent: list[str] = field(default_factory=list)
    taste: list[str] = field(default_factory=list)
    touch: list[str] = field(default_factory=list)
    sound: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sight": list(self.sight),
            "scent": list(self.scent),
            "taste": list(self.taste),
            "touch": list(self.touch),
            "sound": list(self.sound),
        }


@dataclass(frozen=True)
class ComicFields:
    episode_number: int = 1
    panels: list[ComicPanel] = field(default_factory=list)
    sensory_memory: SensoryMemory | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "episodeNumber": self.episode_number,
            "panels": [panel.to_dict() for panel in self.panels],
        }
        if self.sensory_memory is not None:
            data["sensoryMemory"] = self.sensory_memory.to_dict()
        return data


@dataclass(frozen=True)
class AudioFile:
    url: str = ""
    duration: str = "0:00"


@dataclass(frozen=True)
class StructureSection:
    timestamp: str = "0:00"
    summary: str = ""


@dataclass(frozen=True)
class MainContentSection:
    timestamp: str = "0:00"
    topics: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PodcastStructure:
    intro: StructureSection = field(default_factory=StructureSection)
    main_content: MainContentSection = field(default_factory=MainContentSection)
    outro: StructureSection = field(default_factory=StructureSection)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intro": {"timestamp": self.intro.timestamp, "summary": self.intro.summary},
            "mainContent": {
                "timestamp": self.main_content.timestamp,
                "topics": list(self.main_content.topics),
            },
            "outro": {"timestamp": self.outro.timestamp, "summary": self.outro.summary},
        }


@dataclass(frozen=True)
class PodcastFields:
    audio_file: AudioFile = field(default_factory=AudioFile)
    structure: PodcastStructure = field(default_factory=PodcastStructure)
    transcript: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "audioFile": {"url": self.audio_file.url, "duration": self.audio_file.duration},
            "structure": self.structure.to_dict(),
            "transcript": self.transcript,
        }


VariantFields = Union[ArticleFields, ComicFields, PodcastFields]

_FIELDS_BY_TYPE: dict[ContentType, type] = {
    ContentType.ARTICLE: ArticleFields,
    ContentType.COMIC: ComicFields,
    ContentType.PODCAST: PodcastFields,
}


@dataclass(frozen=True)
class Content:
    """A transformed content item: shared base plus one variant payload.

    The payload type always matches ``base.content_type``.
    """

    base: ContentBase
    fields: VariantFields

    def __post_init__(self) -> None:
        expected = _FIELDS_BY_TYPE[self.base.content_type]
        if not isinstance(self.fields, expected):
            raise TypeError(
                f"{self.base.content_type.value} content requires {expected.__name__}, "
                f"got {type(self.fields).__name__}"
            )

    @property
    def content_type(self) -> ContentType:
        return self.base.content_type

    @property
    def id(self) -> str:
        return self.base.id

    @property
    def slug(self) -> str:
        return self.base.slug

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON shape used by backups and API documents."""
        data = self.base.to_dict()
        data.update(self.fields.to_dict())
        return data
