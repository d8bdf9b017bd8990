"""Internal runtime helpers for TUI widget refs and refresh orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from textual.widget import Widget
from textual.widgets import Input, Label, Static

from unwatched_browser.widgets import ContextFooter, QueueTable


@dataclass(slots=True)
class UiRefs:
    """Cached widget references for hot UI paths.

    These refs are internal-only and must not be treated as a public API.
    """

    search_input: Input | None = None
    search_container: Widget | None = None
    queue_table: QueueTable | None = None
    list_header: Label | None = None
    empty_state: Static | None = None
    status_bar: Label | None = None
    footer: ContextFooter | None = None

    def reset(self) -> None:
        """Clear all cached refs (for unmount/teardown)."""
        self.search_input = None
        self.search_container = None
        self.queue_table = None
        self.list_header = None
        self.empty_state = None
        self.status_bar = None
        self.footer = None


@dataclass(slots=True)
class UiRefreshCoordinator:
    """Small boundary object for orchestrating common refresh sequences."""

    refresh_table: Callable[[], None]
    update_list_header: Callable[[], None]
    update_status_bar: Callable[[], None]
    update_footer: Callable[[], None]

    def apply_view_refresh(self) -> None:
        """Re-render after a snapshot, sort, or filter change."""
        self.refresh_table()
        self.update_list_header()
        self.update_status_bar()

    def apply_mode_refresh(self) -> None:
        """Update chrome after entering or leaving search mode."""
        self.update_footer()
        self.update_status_bar()


__all__ = [
    "UiRefreshCoordinator",
    "UiRefs",
]
