"""Command palette modal."""

from __future__ import annotations

from rapidfuzz import fuzz
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from unwatched_browser.query import escape_rich_text
from unwatched_browser.themes import THEME_COLORS

PaletteCommand = tuple[str, str, str, str]  # (name, description, key hint, action)

# Minimum rapidfuzz partial_ratio for a command to be listed
MIN_MATCH_SCORE = 40


def rank_commands(query: str, commands: list[PaletteCommand]) -> list[PaletteCommand]:
    """Order commands by fuzzy match against name and description, best first."""
    q = query.strip().lower()
    if not q:
        return list(commands)
    scored: list[tuple[float, PaletteCommand]] = []
    for cmd in commands:
        name, desc, _, _ = cmd
        score = max(fuzz.partial_ratio(q, name.lower()), fuzz.partial_ratio(q, desc.lower()))
        if score >= MIN_MATCH_SCORE:
            scored.append((score, cmd))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [cmd for _, cmd in scored]


class CommandPaletteModal(ModalScreen[str]):
    """Fuzzy-searchable palette; dismisses with the chosen action string."""

    BINDINGS = [
        Binding("escape", "cancel", "Close"),
    ]

    DEFAULT_CSS = """
    CommandPaletteModal {
        align: center middle;
    }

    CommandPaletteModal > Vertical {
        width: 70;
        max-height: 28;
        background: $th-panel;
        border: thick $th-accent;
        padding: 1 2;
    }

    CommandPaletteModal #palette-search {
        margin-bottom: 1;
    }

    CommandPaletteModal #palette-results {
        height: 1fr;
    }

    CommandPaletteModal #palette-footer {
        color: $th-muted;
        margin-top: 1;
    }
    """

    def __init__(self, commands: list[PaletteCommand]) -> None:
        super().__init__()
        self._commands = commands
        self._filtered: list[PaletteCommand] = list(commands)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(f"[bold {THEME_COLORS['accent']}]Commands[/]")
            yield Input(placeholder="Type to find a command...", id="palette-search")
            yield OptionList(id="palette-results")
            yield Static("Run: Enter  Close: Esc", id="palette-footer")

    def on_mount(self) -> None:
        self._populate_results("")
        self.query_one("#palette-search", Input).focus()

    @on(Input.Changed, "#palette-search")
    def _on_search_changed(self, event: Input.Changed) -> None:
        self._populate_results(event.value)

    def _populate_results(self, query: str) -> None:
        option_list = self.query_one("#palette-results", OptionList)
        option_list.clear_options()
        self._filtered = rank_commands(query, self._commands)

        if not self._filtered:
            option_list.add_option(
                Option(
                    f'[dim]No commands match [bold]"{escape_rich_text(query.strip())}"[/bold].[/]',
                    disabled=True,
                )
            )
            return

        accent = THEME_COLORS["accent"]
        muted = THEME_COLORS["muted"]
        for name, desc, key_hint, action in self._filtered:
            markup = (
                f"[bold]{escape_rich_text(name)}[/]  [{muted}]{escape_rich_text(desc)}[/]"
                f"\n  [{accent}]{escape_rich_text(key_hint)}[/]"
            )
            option_list.add_option(Option(markup, id=action))
        option_list.highlighted = 0

    @on(OptionList.OptionSelected, "#palette-results")
    def _on_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_id is not None:
            self.dismiss(str(event.option_id))

    @on(Input.Submitted, "#palette-search")
    def _on_search_submitted(self) -> None:
        """Run the highlighted command."""
        option_list = self.query_one("#palette-results", OptionList)
        idx = option_list.highlighted
        if idx is not None and 0 <= idx < len(self._filtered):
            self.dismiss(self._filtered[idx][3])

    def action_cancel(self) -> None:
        self.dismiss("")


__all__ = [
    "MIN_MATCH_SCORE",
    "CommandPaletteModal",
    "PaletteCommand",
    "rank_commands",
]
