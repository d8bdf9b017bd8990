"""Channel modals: add a channel to crawl, list crawled channels."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from unwatched_browser.query import escape_rich_text
from unwatched_browser.themes import THEME_COLORS, get_channel_color

logger = logging.getLogger(__name__)


class AddChannelModal(ModalScreen[str | None]):
    """Dialog bound to the channel draft.

    ``submit`` sends the value and returns True on success; the dialog then
    closes with the submitted id. On failure (or blank input) it stays open
    with the typed value so the user can retry.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    AddChannelModal {
        align: center middle;
    }

    #channel-dialog {
        width: 60%;
        min-width: 50;
        height: auto;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #channel-title {
        text-style: bold;
        color: $th-accent-alt;
        margin-bottom: 1;
    }

    #channel-help {
        color: $th-muted;
        margin-bottom: 1;
    }

    #channel-input {
        width: 100%;
        background: $th-panel;
        border: none;
    }

    #channel-input:focus {
        border-left: tall $th-accent;
    }

    #channel-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #channel-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(
        self,
        submit: Callable[[str], Awaitable[bool]],
        *,
        initial_value: str = "",
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__()
        self._submit = submit
        self._initial_value = initial_value
        self._on_change = on_change
        self._submitting = False

    def compose(self) -> ComposeResult:
        with Vertical(id="channel-dialog"):
            yield Label("Add Channel", id="channel-title")
            yield Label("The server will start collecting this channel's videos.", id="channel-help")
            yield Input(
                value=self._initial_value,
                placeholder="Channel id (e.g., UC_x5XG1OV2P6uZZ5FSM9Ttw)",
                id="channel-input",
            )
            with Horizontal(id="channel-buttons"):
                yield Button("Cancel (Esc)", variant="default", id="channel-cancel")
                yield Button("Add (Enter)", variant="primary", id="channel-add")

    def on_mount(self) -> None:
        self.query_one("#channel-input", Input).focus()

    @on(Input.Changed, "#channel-input")
    def _on_input_changed(self, event: Input.Changed) -> None:
        if self._on_change is not None:
            self._on_change(event.value)

    async def action_add(self) -> None:
        if self._submitting:
            return
        value = self.query_one("#channel-input", Input).value
        self._submitting = True
        try:
            ok = await self._submit(value)
        finally:
            self._submitting = False
        if ok:
            self.dismiss(value.strip())
        else:
            self.query_one("#channel-input", Input).focus()

    def action_cancel(self) -> None:
        self.dismiss(None)

    @on(Input.Submitted, "#channel-input")
    async def _on_input_submitted(self) -> None:
        await self.action_add()

    @on(Button.Pressed, "#channel-add")
    async def _on_add_pressed(self) -> None:
        await self.action_add()

    @on(Button.Pressed, "#channel-cancel")
    def _on_cancel_pressed(self) -> None:
        self.action_cancel()


class ChannelListModal(ModalScreen[None]):
    """Read-only list of every channel the server crawls."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close", show=False),
    ]

    CSS = """
    ChannelListModal {
        align: center middle;
    }

    #channels-dialog {
        width: 60%;
        height: 70%;
        min-width: 40;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #channels-title {
        text-style: bold;
        color: $th-accent;
        margin-bottom: 1;
    }

    #channels-list {
        height: 1fr;
        background: $th-panel;
        border: none;
    }

    #channels-footer {
        color: $th-muted;
        margin-top: 1;
    }
    """

    def __init__(self, channel_ids: list[str], theme_name: str = "monokai") -> None:
        super().__init__()
        self._channel_ids = sorted(channel_ids, key=str.casefold)
        self._theme_name = theme_name

    def compose(self) -> ComposeResult:
        with Vertical(id="channels-dialog"):
            yield Label(f"Channels ({len(self._channel_ids)})", id="channels-title")
            yield OptionList(id="channels-list")
            yield Static("Close: Esc", id="channels-footer")

    def on_mount(self) -> None:
        option_list = self.query_one("#channels-list", OptionList)
        if not self._channel_ids:
            option_list.add_option(
                Option(
                    f"[{THEME_COLORS['muted']}]No channels yet. Press a in the main view to add one.[/]",
                    disabled=True,
                )
            )
            return
        for channel_id in self._channel_ids:
            color = get_channel_color(channel_id, self._theme_name)
            option_list.add_option(
                Option(f"[{color}]{escape_rich_text(channel_id)}[/]", id=channel_id)
            )
        option_list.focus()

    def action_close(self) -> None:
        self.dismiss(None)


__all__ = [
    "AddChannelModal",
    "ChannelListModal",
]
