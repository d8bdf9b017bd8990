"""Parsing of server payloads and construction of URLs."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from unwatched_browser.models import DEFAULT_VIDEO_HOST, Entry

logger = logging.getLogger(__name__)

# Server JSON field name -> Entry attribute
ENTRY_WIRE_FIELDS: dict[str, str] = {
    "video_id": "video_id",
    "title": "title",
    "channel_id": "channel_id",
    "published": "published_at",
}


def parse_entry(raw: Any) -> Entry:
    """Build an Entry from one JSON object. Raises ValueError on bad shape."""
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object for an entry, got {type(raw).__name__}")
    values: dict[str, str] = {}
    for wire_name, attr in ENTRY_WIRE_FIELDS.items():
        value = raw.get(wire_name)
        if not isinstance(value, str):
            raise ValueError(f"Entry field {wire_name!r} missing or not a string")
        values[attr] = value
    if not values["video_id"]:
        raise ValueError("Entry has an empty video_id")
    return Entry(**values)


def parse_entries(payload: Any) -> list[Entry]:
    """Parse the unwatched-videos payload into entries.

    A ``null`` payload (the server's aggregate over zero rows) is an empty
    queue. Duplicate ``video_id`` values keep their first occurrence.
    """
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of entries, got {type(payload).__name__}")
    entries: list[Entry] = []
    seen_ids: set[str] = set()
    for raw in payload:
        entry = parse_entry(raw)
        if entry.video_id in seen_ids:
            logger.warning("Skipping duplicate entry for video %s", entry.video_id)
            continue
        seen_ids.add(entry.video_id)
        entries.append(entry)
    return entries


def parse_channel_ids(payload: Any) -> list[str]:
    """Parse the all-channel-ids payload into a list of ids."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of channel ids, got {type(payload).__name__}")
    return [item for item in payload if isinstance(item, str) and item]


def normalize_base_url(url: str) -> str:
    """Validate an API base URL and strip any trailing slash.

    The URL must also be one httpx can send to, so a bad port or host is
    rejected here rather than on the first request.
    """
    cleaned = url.strip()
    parts = urlsplit(cleaned)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Invalid API base URL: {url!r}")
    try:
        port = parts.port
        httpx.URL(cleaned)
    except (ValueError, httpx.InvalidURL) as e:
        raise ValueError(f"Invalid API base URL: {url!r} ({e})") from e
    if not parts.hostname or port == 0:
        raise ValueError(f"Invalid API base URL: {url!r}")
    return cleaned.rstrip("/")


def build_watch_url(video_id: str, video_host: str = DEFAULT_VIDEO_HOST) -> str:
    """Return the external viewing URL for a video."""
    return f"https://{video_host}/watch?v={quote(video_id, safe='')}"


__all__ = [
    "ENTRY_WIRE_FIELDS",
    "build_watch_url",
    "normalize_base_url",
    "parse_channel_ids",
    "parse_entries",
    "parse_entry",
]
