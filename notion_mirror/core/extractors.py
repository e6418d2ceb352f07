"""
Property extractors for raw Notion property bags and blocks.

Every extractor is total: absent, null or malformed input yields the
documented default instead of raising. Callers pass whatever the remote
store returned for a property, typically ``page["properties"].get(name)``.
"""

from __future__ import annotations

from datetime import date
from typing import Any


def plain_text(rich_text: Any) -> str:
    """Concatenate ``plain_text`` of every rich-text fragment, in order."""
    if not isinstance(rich_text, list):
        return ""
    parts = []
    for item in rich_text:
        if isinstance(item, dict):
            text = item.get("plain_text")
            if isinstance(text, str):
                parts.append(text)
    return "".join(parts)


def extract_rich_text(prop: Any) -> str:
    if not isinstance(prop, dict):
        return ""
    return plain_text(prop.get("rich_text"))


def extract_title(prop: Any) -> str:
    """Extract a title property, accepting both ``title`` and ``name`` arrays."""
    if not isinstance(prop, dict):
        return ""
    fragments = prop.get("title") or prop.get("name") or []
    return plain_text(fragments)


def extract_multi_select(prop: Any) -> list[str]:
    if not isinstance(prop, dict) or not isinstance(prop.get("multi_select"), list):
        return []
    names = []
    for option in prop["multi_select"]:
        if isinstance(option, dict) and isinstance(option.get("name"), str):
            names.append(option["name"])
    return names


def extract_select(prop: Any) -> str:
    if not isinstance(prop, dict) or not isinstance(prop.get("select"), dict):
        return ""
    name = prop["select"].get("name")
    return name if isinstance(name, str) else ""


def extract_date(prop: Any) -> str:
    """Return the ``YYYY-MM-DD`` part of a date property's start value."""
    if not isinstance(prop, dict) or not isinstance(prop.get("date"), dict):
        return ""
    start = prop["date"].get("start")
    if not isinstance(start, str) or not start:
        return ""
    day = start.split("T", 1)[0]
    try:
        date.fromisoformat(day)
    except ValueError:
        return ""
    return day


def extract_number(prop: Any) -> float:
    if not isinstance(prop, dict):
        return 0
    value = prop.get("number")
    # bool is an int subclass; a checkbox value is not a score
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def media_url(payload: Any) -> str | None:
    """URL of an internally (``file``) or externally (``external``) hosted file."""
    if not isinstance(payload, dict):
        return None
    for kind in ("file", "external"):
        hosted = payload.get(kind)
        if isinstance(hosted, dict) and isinstance(hosted.get("url"), str) and hosted["url"]:
            return hosted["url"]
    return None


def extract_file_url(prop: Any) -> str | None:
    """URL of the first entry of a files property, or None when empty."""
    if not isinstance(prop, dict):
        return None
    files = prop.get("files")
    if not isinstance(files, list) or not files:
        return None
    first = files[0]
    if not isinstance(first, dict):
        return None
    kind = first.get("type")
    if kind in ("external", "file"):
        hosted = first.get(kind)
        if isinstance(hosted, dict) and isinstance(hosted.get("url"), str):
            return hosted["url"]
    return None


def block_payload(block: Any) -> dict[str, Any]:
    """The type-keyed payload of a block (``block[block["type"]]``)."""
    if not isinstance(block, dict):
        return {}
    block_type = block.get("type")
    if not isinstance(block_type, str):
        return {}
    payload = block.get(block_type)
    return payload if isinstance(payload, dict) else {}


def block_type(block: Any) -> str:
    if not isinstance(block, dict) or not isinstance(block.get("type"), str):
        return ""
    return block["type"]


def block_text(block: Any) -> str:
    """Plain text of a text-bearing block (paragraph, heading, ...)."""
    return plain_text(block_payload(block).get("rich_text"))


def page_property(page: Any, *names: str) -> Any:
    """First present property among ``names``, most specific first."""
    if not isinstance(page, dict) or not isinstance(page.get("properties"), dict):
        return None
    props = page["properties"]
    for name in names:
        prop = props.get(name)
        if prop:
            return prop
    return None
