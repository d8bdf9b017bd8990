"""General-purpose modal dialogs."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Label, Static

from unwatched_browser.themes import THEME_COLORS

HelpSection = tuple[str, list[tuple[str, str]]]


class HelpScreen(ModalScreen[None]):
    """Full-screen help overlay showing all keyboard shortcuts by category."""

    _DEFAULT_SECTIONS: list[HelpSection] = [
        (
            "Navigation",
            [
                ("j / k", "Move down / up"),
                ("1 2 3 4", "Sort by ID / date / channel / title (again to flip)"),
                ("click header", "Same as the number keys"),
            ],
        ),
        (
            "Search",
            [
                ("/", "Toggle search"),
                ("Esc", "Clear search"),
            ],
        ),
        (
            "Queue",
            [
                ("Enter / w", "Open video and mark it watched"),
                ("x / Del", "Mark watched without opening"),
                ("r", "Refresh from server"),
            ],
        ),
        (
            "Channels",
            [
                ("a", "Add a channel to crawl"),
                ("C", "List crawled channels"),
            ],
        ),
        (
            "General",
            [
                ("Ctrl+p", "Command palette"),
                ("Ctrl+t", "Cycle theme"),
                ("?", "Help overlay"),
                ("q", "Quit"),
            ],
        ),
    ]

    BINDINGS = [
        Binding("question_mark", "dismiss", "Close", show=False),
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close", show=False),
    ]

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 70%;
        height: 80%;
        min-width: 50;
        min-height: 18;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
        overflow-y: auto;
    }

    #help-title {
        text-style: bold;
        color: $th-accent-alt;
        text-align: center;
        margin-bottom: 1;
    }

    .help-section-title {
        text-style: bold;
    }

    .help-keys {
        padding-left: 2;
        margin-bottom: 1;
        color: $th-text;
    }

    #help-footer {
        text-align: center;
        color: $th-muted;
    }
    """

    def __init__(
        self,
        sections: list[HelpSection] | None = None,
        footer_note: str = "Close: ? / Esc / q",
    ) -> None:
        super().__init__()
        self._sections = sections or list(self._DEFAULT_SECTIONS)
        self._footer_note = footer_note

    @staticmethod
    def _render_section_lines(entries: list[tuple[str, str]]) -> str:
        green = THEME_COLORS["green"]
        return "\n".join(f"  [{green}]{key}[/]  {description}" for key, description in entries)

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="help-dialog"):
            yield Label("Keyboard Shortcuts", id="help-title")
            for section_name, entries in self._sections:
                if not entries:
                    continue
                yield Label(
                    f"[{THEME_COLORS['accent']}]{section_name}[/]",
                    classes="help-section-title",
                )
                yield Static(self._render_section_lines(entries), classes="help-keys")
            yield Label(self._footer_note, id="help-footer")

    def action_dismiss(self) -> None:
        self.dismiss(None)


__all__ = [
    "HelpScreen",
]
