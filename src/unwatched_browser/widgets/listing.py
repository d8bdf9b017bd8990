"""Table rendering helpers and the queue table widget."""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual.widgets import DataTable

from unwatched_browser.models import (
    SORT_ASCENDING,
    SORT_DESCENDING,
    SORT_KEY_LABELS,
    SORT_KEYS,
    Entry,
    SortState,
)
from unwatched_browser.query import escape_rich_text, highlight_text, truncate_text
from unwatched_browser.themes import THEME_COLORS, get_channel_color

TITLE_MAX_LEN = 90  # Longer titles are cut in the table, full text stays searchable

_SORT_ARROWS = {SORT_ASCENDING: "▲", SORT_DESCENDING: "▼"}


def column_label(key: str, sort_state: SortState) -> Text:
    """Header label for ``key``, with an arrow on the active sort column."""
    label = SORT_KEY_LABELS[key]
    if sort_state.key != key:
        return Text(label)
    return Text.from_markup(
        f"[bold {THEME_COLORS['accent']}]{label} {_SORT_ARROWS[sort_state.direction]}[/]"
    )


def render_entry_cells(entry: Entry, query: str, theme_name: str) -> tuple[Text, ...]:
    """Build one table row for ``entry`` in column order, highlighting ``query``."""
    accent = THEME_COLORS["accent"]
    channel_color = get_channel_color(entry.channel_id, theme_name)
    title = truncate_text(entry.title, TITLE_MAX_LEN)
    return (
        Text.from_markup(f"[dim]{escape_rich_text(entry.video_id)}[/]"),
        Text.from_markup(highlight_text(entry.published_at, query, accent)),
        Text.from_markup(f"[{channel_color}]{highlight_text(entry.channel_id, query, accent)}[/]"),
        Text.from_markup(highlight_text(title, query, accent)),
    )


class QueueTable(DataTable):
    """Zebra-striped table of queue entries, one column per sort key."""

    DEFAULT_CSS = """
    QueueTable {
        height: 1fr;
        background: $th-panel;
        scrollbar-gutter: stable;
    }

    QueueTable > .datatable--even-row {
        background: $th-stripe;
    }

    QueueTable > .datatable--cursor {
        background: $th-highlight-focus;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(zebra_stripes=True, cursor_type="row", **kwargs)

    @property
    def current_video_id(self) -> str | None:
        """Video id of the row under the cursor, if any."""
        if self.row_count == 0:
            return None
        try:
            row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        except KeyError:
            return None
        return row_key.value

    def populate(
        self,
        entries: Sequence[Entry],
        sort_state: SortState,
        *,
        query: str = "",
        theme_name: str = "monokai",
    ) -> None:
        """Replace all rows, keeping the cursor on the same video when it survives."""
        previous = self.current_video_id
        self.clear(columns=True)
        for key in SORT_KEYS:
            self.add_column(column_label(key, sort_state), key=key)
        cursor_row = 0
        for index, entry in enumerate(entries):
            self.add_row(*render_entry_cells(entry, query, theme_name), key=entry.video_id)
            if entry.video_id == previous:
                cursor_row = index
        if entries:
            self.move_cursor(row=cursor_row)


__all__ = [
    "TITLE_MAX_LEN",
    "QueueTable",
    "column_label",
    "render_entry_cells",
]
