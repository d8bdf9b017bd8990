"""Shared test fixtures for the unwatched queue browser tests."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from unwatched_browser.collation import collation_key
from unwatched_browser.models import Entry, UserConfig
from unwatched_browser.query import _HIGHLIGHT_PATTERN_CACHE
from unwatched_browser.services.interfaces import AppServices
from unwatched_browser.themes import MONOKAI_THEME, THEME_COLORS

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS and clear caches after each test.

    UnwatchedBrowser.__init__ swaps THEME_COLORS to the configured theme.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(MONOKAI_THEME)
    _HIGHLIGHT_PATTERN_CACHE.clear()
    collation_key.cache_clear()


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_entry():
    """Factory fixture for creating Entry instances with sensible defaults."""

    def _make(
        video_id: str = "v1",
        title: str = "Test Video",
        channel_id: str = "UCtest",
        published_at: str = "2024-01-01T00:00:00Z",
    ) -> Entry:
        return Entry(
            video_id=video_id,
            title=title,
            channel_id=channel_id,
            published_at=published_at,
        )

    return _make


@pytest.fixture
def sample_entries(make_entry):
    """Three entries with distinct titles, channels, and dates."""
    return [
        make_entry("v1", "Bravo", "C1", "2024-01-02T10:00:00Z"),
        make_entry("v2", "alpha", "C2", "2024-01-01T09:00:00Z"),
        make_entry("v3", "Charlie", "C1", "2024-01-03T08:00:00Z"),
    ]


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs: Any) -> UserConfig:
        return UserConfig(**kwargs)

    return _make


@pytest.fixture
def status_error():
    """Factory for httpx.HTTPStatusError with the given status code."""

    def _make(status_code: int, url: str = "http://queue.test/api") -> httpx.HTTPStatusError:
        request = httpx.Request("GET", url)
        response = httpx.Response(status_code, request=request)
        return httpx.HTTPStatusError(
            f"HTTP {status_code}", request=request, response=response
        )

    return _make


# ── Service doubles ──────────────────────────────────────────────────────────


class FakeQueueApi:
    """In-memory stand-in for the queue server.

    ``failures`` maps an operation name to an exception raised on its next call.
    """

    def __init__(self, entries: list[Entry] | None = None) -> None:
        self.entries: list[Entry] = list(entries or [])
        self.channel_ids: list[str] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, BaseException] = {}

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [kwargs for call_name, kwargs in self.calls if call_name == name]

    async def fetch_unwatched(self, *, client, base_url, timeout_seconds) -> list[Entry]:
        self._record("fetch_unwatched", base_url=base_url, timeout_seconds=timeout_seconds)
        return list(self.entries)

    async def set_video_watched(
        self, *, client, base_url, server_key, video_id, timeout_seconds
    ) -> None:
        self._record("set_video_watched", server_key=server_key, video_id=video_id)
        self.entries = [entry for entry in self.entries if entry.video_id != video_id]

    async def insert_channel(self, *, client, base_url, channel_id, timeout_seconds) -> None:
        self._record("insert_channel", channel_id=channel_id)
        self.channel_ids.append(channel_id)

    async def fetch_channel_ids(self, *, client, base_url, timeout_seconds) -> list[str]:
        self._record("fetch_channel_ids")
        return list(self.channel_ids)


class FakeCredentials:
    def __init__(self, key: str = "test-key") -> None:
        self.key = key

    def server_key(self) -> str:
        return self.key


class FakeOpener:
    def __init__(self) -> None:
        self.opened: list[str] = []
        self.error: BaseException | None = None

    def open(self, url: str) -> None:
        self.opened.append(url)
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_queue_api(sample_entries):
    return FakeQueueApi(sample_entries)


@pytest.fixture
def fake_opener():
    return FakeOpener()


@pytest.fixture
def fake_services(fake_queue_api, fake_opener):
    return AppServices(
        queue_api=fake_queue_api,
        credentials=FakeCredentials(),
        opener=fake_opener,
    )
