"""Unwatched queue browser: a TUI client for a self-hosted unwatched-videos server.

Re-exports the core (non-UI) API so scripts can use the queue without Textual:

    from unwatched_browser import SortState, FilterState, render_entries
"""

from unwatched_browser.collation import collation_key, compare
from unwatched_browser.dispatcher import ActionDispatcher
from unwatched_browser.errors import FetchFailed, QueueError, RemoteMutationFailed
from unwatched_browser.models import (
    SORT_ASCENDING,
    SORT_DESCENDING,
    SORT_KEYS,
    ChannelDraft,
    Entry,
    FilterState,
    Snapshot,
    SortState,
    UserConfig,
)
from unwatched_browser.query import (
    FilterController,
    SortController,
    filter_entries,
    render_entries,
    sort_entries,
)
from unwatched_browser.snapshot import SnapshotStore

__version__ = "0.1.0"

__all__ = [
    "SORT_ASCENDING",
    "SORT_DESCENDING",
    "SORT_KEYS",
    "ActionDispatcher",
    "ChannelDraft",
    "Entry",
    "FetchFailed",
    "FilterController",
    "FilterState",
    "QueueError",
    "RemoteMutationFailed",
    "Snapshot",
    "SnapshotStore",
    "SortController",
    "SortState",
    "UserConfig",
    "collation_key",
    "compare",
    "filter_entries",
    "render_entries",
    "sort_entries",
]
