"""Internal UI constants for the UnwatchedBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

# Delay before a typed search is applied to the table
SEARCH_DEBOUNCE_DELAY = 0.3

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#main-container {
    height: 1fr;
    border: tall $th-highlight;
    background: $th-panel;
}

#main-container:focus-within {
    border: tall $th-accent;
}

#list-header {
    padding: 0 1;
    background: $th-panel;
    color: $th-accent;
    text-style: bold;
}

#search-container {
    height: auto;
    padding: 0 1;
    background: $th-panel;
    display: none;
}

#search-container.visible {
    display: block;
}

#search-input {
    width: 100%;
    border: tall $th-accent;
    background: $th-background;
}

#search-input:focus {
    border: tall $th-accent-alt;
}

#empty-state {
    padding: 1 2;
    color: $th-muted;
    text-style: italic;
    display: none;
}

#empty-state.visible {
    display: block;
}

#status-bar {
    padding: 0 1;
    color: $th-muted;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("slash", "toggle_search", "Search", show=False),
    Binding("escape", "cancel_search", "Cancel", show=False),
    # Queue actions
    Binding("w", "watch", "Watch", show=False),
    Binding("x", "mark_watched", "Mark watched", show=False),
    Binding("delete", "mark_watched", "Mark watched", show=False),
    Binding("r", "refresh", "Refresh", show=False),
    # Channels
    Binding("a", "add_channel", "Add channel", show=False),
    Binding("C", "channel_list", "Channels", show=False),
    # Sorting: same keys as clicking the column headers
    Binding("1", "sort_by('video_id')", "Sort by ID", show=False),
    Binding("2", "sort_by('published_at')", "Sort by date", show=False),
    Binding("3", "sort_by('channel_id')", "Sort by channel", show=False),
    Binding("4", "sort_by('title')", "Sort by title", show=False),
    Binding("j", "cursor_down", "Down", show=False),
    Binding("k", "cursor_up", "Up", show=False),
    # Theme cycling
    Binding("ctrl+t", "cycle_theme", "Theme", show=False),
    # Help overlay
    Binding("question_mark", "show_help", "Help (?)", show=False),
    # Command palette
    Binding("ctrl+p", "command_palette", "Commands", show=False),
]

# (name, description, key hint, action) rows for the command palette
PALETTE_COMMANDS: list[tuple[str, str, str, str]] = [
    ("Watch", "Open the selected video and mark it watched", "enter / w", "watch"),
    ("Mark watched", "Remove the selected video without opening it", "x / Del", "mark_watched"),
    ("Refresh", "Reload the unwatched queue from the server", "r", "refresh"),
    ("Search", "Filter by channel, title, or date", "/", "toggle_search"),
    ("Add channel", "Start crawling a new channel", "a", "add_channel"),
    ("Channels", "List crawled channels", "C", "channel_list"),
    ("Sort by ID", "Sort or flip the ID column", "1", "sort_by('video_id')"),
    ("Sort by date", "Sort or flip the Date column", "2", "sort_by('published_at')"),
    ("Sort by channel", "Sort or flip the Channel column", "3", "sort_by('channel_id')"),
    ("Sort by title", "Sort or flip the Title column", "4", "sort_by('title')"),
    ("Cycle theme", "Switch to the next color theme", "Ctrl+t", "cycle_theme"),
    ("Help", "Show keyboard shortcuts", "?", "show_help"),
    ("Quit", "Exit the browser", "q", "quit"),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "PALETTE_COMMANDS",
    "SEARCH_DEBOUNCE_DELAY",
]
