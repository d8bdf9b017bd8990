"""Data models and constants for the unwatched queue browser."""

from __future__ import annotations

from dataclasses import dataclass, field

# Application identity: single source of truth for platformdirs config paths
CONFIG_APP_NAME = "unwatched-browser"

# Sortable columns, in display order (ID, Date, Channel, Title)
SORT_KEYS = ("video_id", "published_at", "channel_id", "title")
SORT_KEY_LABELS: dict[str, str] = {
    "video_id": "ID",
    "published_at": "Date",
    "channel_id": "Channel",
    "title": "Title",
}

SORT_ASCENDING = "ascending"
SORT_DESCENDING = "descending"
SORT_DIRECTIONS = (SORT_ASCENDING, SORT_DESCENDING)

DEFAULT_SORT_KEY = "published_at"
DEFAULT_API_BASE_URL = "http://127.0.0.1:8080"
DEFAULT_VIDEO_HOST = "www.youtube.com"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15
MAX_REQUEST_TIMEOUT_SECONDS = 120
MAX_AUTO_REFRESH_MINUTES = 24 * 60

# Sent until real authentication replaces the shared server key.
PLACEHOLDER_SERVER_KEY = "placeholder-server-key"


@dataclass(frozen=True, slots=True)
class Entry:
    """One video in the unwatched queue."""

    video_id: str
    title: str
    channel_id: str
    published_at: str  # ISO 8601, lexicographic order == chronological order


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Local copy of the server's unwatched collection, replaced wholesale."""

    entries: tuple[Entry, ...] = ()
    generation: int = 0  # refresh generation that produced this snapshot


@dataclass(frozen=True, slots=True)
class SortState:
    """Active sort column and direction. ``key=None`` keeps snapshot order."""

    key: str | None = DEFAULT_SORT_KEY
    direction: str = SORT_ASCENDING  # "ascending" | "descending"

    def __post_init__(self) -> None:
        if self.key is not None and self.key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {self.key!r}")
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction: {self.direction!r}")


@dataclass(frozen=True, slots=True)
class FilterState:
    """Current search text."""

    query: str = ""


@dataclass(slots=True)
class ChannelDraft:
    """Transient state of the add-channel dialog."""

    channel_id: str = ""
    dialog_open: bool = False

    def open(self) -> None:
        self.dialog_open = True

    def reset(self) -> None:
        """Close the dialog and forget the typed value."""
        self.channel_id = ""
        self.dialog_open = False


@dataclass(slots=True)
class UserConfig:
    """User preferences loaded from the config file."""

    api_base_url: str = DEFAULT_API_BASE_URL
    server_key: str = ""  # Empty = UNWATCHED_SERVER_KEY env var, then placeholder
    video_host: str = DEFAULT_VIDEO_HOST
    default_sort_key: str = DEFAULT_SORT_KEY
    default_sort_direction: str = SORT_ASCENDING
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    auto_refresh_minutes: int = 0  # 0 = only refresh on demand
    theme_name: str = "monokai"
    config_defaulted: bool = field(default=False, compare=False)  # set when the file was unusable
    version: int = 1

    def initial_sort_state(self) -> SortState:
        return SortState(key=self.default_sort_key, direction=self.default_sort_direction)


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_SORT_KEY",
    "DEFAULT_VIDEO_HOST",
    "MAX_AUTO_REFRESH_MINUTES",
    "MAX_REQUEST_TIMEOUT_SECONDS",
    "PLACEHOLDER_SERVER_KEY",
    "SORT_ASCENDING",
    "SORT_DESCENDING",
    "SORT_DIRECTIONS",
    "SORT_KEYS",
    "SORT_KEY_LABELS",
    "ChannelDraft",
    "Entry",
    "FilterState",
    "Snapshot",
    "SortState",
    "UserConfig",
]
