"""Internal queue API service helpers for fetching entries and sending mutations."""

from __future__ import annotations

from typing import Any

import httpx

from unwatched_browser.models import Entry
from unwatched_browser.parsing import parse_channel_ids, parse_entries

UNWATCHED_VIDEOS_PATH = "/api/unwatched_videos"
SET_VIDEO_WATCHED_PATH = "/api/set_video_watched"
INSERT_CHANNEL_PATH = "/api/insert_channel"
ALL_CHANNEL_IDS_PATH = "/api/all_channel_ids"


async def _request(
    client: httpx.AsyncClient | None,
    method: str,
    url: str,
    *,
    timeout_seconds: float,
    json_body: dict[str, Any] | None = None,
) -> httpx.Response:
    """Send one request, using a temporary client when no shared one is given."""
    if client is not None:
        response = await client.request(method, url, json=json_body, timeout=timeout_seconds)
    else:
        async with httpx.AsyncClient() as tmp_client:
            response = await tmp_client.request(
                method, url, json=json_body, timeout=timeout_seconds
            )
    response.raise_for_status()
    return response


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ValueError(f"Server returned invalid JSON: {exc}") from exc


async def fetch_unwatched(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    timeout_seconds: float,
) -> list[Entry]:
    """Fetch the full unwatched collection."""
    response = await _request(
        client, "GET", f"{base_url}{UNWATCHED_VIDEOS_PATH}", timeout_seconds=timeout_seconds
    )
    if not response.content.strip():
        return []
    return parse_entries(_decode_json(response))


async def set_video_watched(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    server_key: str,
    video_id: str,
    timeout_seconds: float,
) -> None:
    """Mark one video watched on the server."""
    await _request(
        client,
        "POST",
        f"{base_url}{SET_VIDEO_WATCHED_PATH}",
        timeout_seconds=timeout_seconds,
        json_body={"server_key": server_key, "video_id": video_id},
    )


async def insert_channel(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    channel_id: str,
    timeout_seconds: float,
) -> None:
    """Ask the server to start crawling a channel."""
    await _request(
        client,
        "POST",
        f"{base_url}{INSERT_CHANNEL_PATH}",
        timeout_seconds=timeout_seconds,
        json_body={"channel_id": channel_id},
    )


async def fetch_channel_ids(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    timeout_seconds: float,
) -> list[str]:
    """Fetch the ids of every channel the server crawls."""
    response = await _request(
        client, "GET", f"{base_url}{ALL_CHANNEL_IDS_PATH}", timeout_seconds=timeout_seconds
    )
    if not response.content.strip():
        return []
    return parse_channel_ids(_decode_json(response))


__all__ = [
    "ALL_CHANNEL_IDS_PATH",
    "INSERT_CHANNEL_PATH",
    "SET_VIDEO_WATCHED_PATH",
    "UNWATCHED_VIDEOS_PATH",
    "fetch_channel_ids",
    "fetch_unwatched",
    "insert_channel",
    "set_video_watched",
]
