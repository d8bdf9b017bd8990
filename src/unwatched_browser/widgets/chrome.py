"""Widget chrome: footer key hints."""

from __future__ import annotations

from textual.widgets import Static

from unwatched_browser.query import escape_rich_text
from unwatched_browser.themes import THEME_COLORS

DEFAULT_FOOTER_BINDINGS: list[tuple[str, str]] = [
    ("enter", "watch"),
    ("x", "mark watched"),
    ("1-4", "sort"),
    ("/", "search"),
    ("a", "add channel"),
    ("r", "refresh"),
    ("?", "help"),
]

SEARCH_FOOTER_BINDINGS: list[tuple[str, str]] = [
    ("type to filter", ""),
    ("esc", "clear"),
    ("enter", "back to list"),
]


def build_status_bar_text(
    *,
    total: int,
    visible: int,
    query: str,
    sort_label: str,
    loading: bool,
    has_loaded: bool,
    auto_refresh_minutes: int = 0,
) -> str:
    """Build the status bar markup: load state, counts, sort, filter."""
    muted = THEME_COLORS["muted"]
    parts: list[str] = []
    if loading:
        parts.append(f"[{THEME_COLORS['orange']}]Loading...[/]")
    needle = query.strip()
    if not has_loaded:
        if not loading:
            parts.append(f"[{muted}]not loaded[/]")
    elif needle:
        parts.append(f"{visible}/{total} shown")
    else:
        parts.append(f"{total} unwatched")
    parts.append(f"[{muted}]sort:[/] {escape_rich_text(sort_label)}")
    if needle:
        parts.append(f'[{muted}]filter:[/] [{THEME_COLORS["accent"]}]"{escape_rich_text(needle)}"[/]')
    if auto_refresh_minutes > 0:
        parts.append(f"[{muted}]auto-refresh {auto_refresh_minutes}m[/]")
    return " · ".join(parts)


class ContextFooter(Static):
    """Context-sensitive footer showing relevant keybindings."""

    DEFAULT_CSS = """
    ContextFooter {
        dock: bottom;
        height: 1;
        background: $th-background;
        color: $th-muted;
        padding: 0 1;
        border-top: solid $th-panel-alt;
    }
    """

    def render_bindings(self, bindings: list[tuple[str, str]], mode_badge: str = "") -> None:
        """Update the footer with a list of (key, label) binding hints."""
        accent = THEME_COLORS["accent"]
        muted = THEME_COLORS["muted"]
        parts = []
        if mode_badge:
            parts.append(mode_badge)
        for key, label in bindings:
            safe_key = escape_rich_text(key)
            if key and label:
                parts.append(f"[bold {accent}]{safe_key}[/] [{muted}]{label}[/]")
            elif label:
                parts.append(f"[italic {muted}]{label}[/]")
            else:
                parts.append(f"[italic {muted}]{safe_key}[/]")
        self.update("  ".join(parts))


__all__ = [
    "DEFAULT_FOOTER_BINDINGS",
    "SEARCH_FOOTER_BINDINGS",
    "ContextFooter",
    "build_status_bar_text",
]
