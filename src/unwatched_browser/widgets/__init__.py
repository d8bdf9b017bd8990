"""Widget classes for the queue browser UI."""

from unwatched_browser.widgets.chrome import (
    DEFAULT_FOOTER_BINDINGS,
    SEARCH_FOOTER_BINDINGS,
    ContextFooter,
    build_status_bar_text,
)
from unwatched_browser.widgets.listing import (
    TITLE_MAX_LEN,
    QueueTable,
    column_label,
    render_entry_cells,
)

__all__ = [
    "DEFAULT_FOOTER_BINDINGS",
    "SEARCH_FOOTER_BINDINGS",
    "TITLE_MAX_LEN",
    "ContextFooter",
    "QueueTable",
    "column_label",
    "build_status_bar_text",
    "render_entry_cells",
]
