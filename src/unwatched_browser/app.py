"""Textual app for browsing and clearing the unwatched videos queue."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import DataTable, Header, Input, Label, Static

from unwatched_browser.action_messages import (
    build_channel_added_notification,
    build_failure_message,
    build_fetch_failure_message,
    build_list_empty_message,
    build_marked_watched_notification,
    build_watched_notification,
)
from unwatched_browser.cli import (
    _configure_color_mode,
    _configure_logging,
    _validate_interactive_tty,
)
from unwatched_browser.cli import main as _cli_main
from unwatched_browser.config import load_config, save_config
from unwatched_browser.dispatcher import ActionDispatcher
from unwatched_browser.errors import FetchFailed, QueueError, RemoteMutationFailed
from unwatched_browser.modals import (
    AddChannelModal,
    ChannelListModal,
    CommandPaletteModal,
    HelpScreen,
)
from unwatched_browser.models import (
    SORT_KEY_LABELS,
    SORT_KEYS,
    Entry,
    Snapshot,
    SortState,
    UserConfig,
)
from unwatched_browser.query import (
    FilterController,
    SortController,
    describe_sort,
    escape_rich_text,
    render_entries,
)
from unwatched_browser.services.interfaces import (
    AppServices,
    QueueConnection,
    bind_unwatched_fetcher,
    build_default_app_services,
)
from unwatched_browser.snapshot import SnapshotStore
from unwatched_browser.themes import TEXTUAL_THEMES, apply_theme_colors, next_theme_name
from unwatched_browser.ui_constants import (
    APP_BINDINGS,
    APP_CSS,
    PALETTE_COMMANDS,
    SEARCH_DEBOUNCE_DELAY,
)
from unwatched_browser.ui_runtime import UiRefreshCoordinator, UiRefs
from unwatched_browser.widgets import (
    DEFAULT_FOOTER_BINDINGS,
    SEARCH_FOOTER_BINDINGS,
    ContextFooter,
    QueueTable,
    build_status_bar_text,
)

logger = logging.getLogger(__name__)

_FAILURE_TITLES = {
    "mark_watched": "Mark watched",
    "watch": "Watch",
    "add_channel": "Add channel",
}


class UnwatchedBrowser(App):
    """A TUI application to work through a queue of unwatched videos."""

    TITLE = "Unwatched Videos"

    # ctrl+p opens our own palette instead of Textual's built-in one
    ENABLE_COMMAND_PALETTE = False

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        config: UserConfig | None = None,
        sort_state: SortState | None = None,
        initial_query: str = "",
        services: AppServices | None = None,
    ) -> None:
        super().__init__()
        # Register all Textual themes so $th-* CSS variables resolve before compose()
        for textual_theme in TEXTUAL_THEMES.values():
            self.register_theme(textual_theme)

        self._config = config or UserConfig()
        self._services: AppServices = services or build_default_app_services(self._config)
        self._connection = QueueConnection(
            base_url=self._config.api_base_url,
            timeout_seconds=self._config.request_timeout_seconds,
        )

        # View state: sort and filter live here, never in the snapshot
        self._sort = SortController(sort_state or self._config.initial_sort_state())
        self._filter = FilterController(initial_query)
        self._visible: list[Entry] = []

        self._store = SnapshotStore(
            bind_unwatched_fetcher(self._services.queue_api, self._connection),
            on_replace=self._on_snapshot_replaced,
            on_error=self._on_fetch_failed,
        )
        self._dispatcher = ActionDispatcher(
            services=self._services,
            store=self._store,
            connection=self._connection,
            video_host=self._config.video_host,
            report_failure=self._report_failure,
        )

        self._search_timer: Timer | None = None
        self._pending_query: str = initial_query
        self._poll_timer: Timer | None = None

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[Any]] = set()

        self._apply_theme()

        # Internal UI boundaries (cached refs + refresh orchestration)
        self._ui_refs = UiRefs()
        self._ui_refresh = UiRefreshCoordinator(
            refresh_table=self._refresh_table,
            update_list_header=self._update_list_header,
            update_status_bar=self._update_status_bar,
            update_footer=self._update_footer,
        )

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def dispatcher(self) -> ActionDispatcher:
        return self._dispatcher

    @property
    def visible_entries(self) -> list[Entry]:
        """Entries currently shown, in display order."""
        return list(self._visible)

    @property
    def sort_state(self) -> SortState:
        return self._sort.state

    @property
    def filter_query(self) -> str:
        return self._filter.query

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            yield Label(" Unwatched", id="list-header")
            with Vertical(id="search-container"):
                yield Input(
                    value=self._filter.query,
                    placeholder=" Filter by channel, title, or date",
                    id="search-input",
                )
            yield QueueTable(id="queue-table")
            yield Static("", id="empty-state")
            yield Label("", id="status-bar")
        yield ContextFooter()

    def on_mount(self) -> None:
        """Create the shared HTTP client and start the first refresh."""
        self._connection.client = httpx.AsyncClient()

        if self._config.config_defaulted:
            self.notify(
                "Config file could not be read. Using defaults.",
                severity="warning",
                timeout=8,
            )

        self._prime_ui_refs()
        self._ui_refresh.apply_view_refresh()
        self._update_footer()

        minutes = self._config.auto_refresh_minutes
        if minutes > 0:
            self._poll_timer = self.set_interval(minutes * 60, self._poll_refresh)

        logger.debug(
            "App mounted: api=%s, sort=%s, auto_refresh=%dm",
            self._connection.base_url,
            self._sort.state,
            minutes,
        )

        try:
            self._get_queue_table_widget().focus()
        except NoMatches:
            pass

        self._track_task(self._run_refresh())

    async def on_unmount(self) -> None:
        """Stop timers, cancel background work, close the HTTP client.

        Uses atomic swap pattern to avoid race conditions with timer callbacks.
        """
        for attr in ("_search_timer", "_poll_timer"):
            timer = getattr(self, attr)
            setattr(self, attr, None)
            if timer is not None:
                timer.stop()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._connection.client
        self._connection.client = None
        if client is not None:
            await client.aclose()
        self._ui_refs.reset()

    # ========================================================================
    # Widget refs
    # ========================================================================

    @staticmethod
    def _is_live_widget(widget: Any) -> bool:
        """Return True for mounted/attached widgets safe to reuse."""
        return bool(widget is not None and getattr(widget, "is_attached", False))

    def _get_cached_widget(self, ref_name: str, resolver: Callable[[], Any]) -> Any:
        """Resolve and cache a widget reference by UiRefs attribute name."""
        widget = getattr(self._ui_refs, ref_name)
        if self._is_live_widget(widget):
            return widget
        widget = resolver()
        setattr(self._ui_refs, ref_name, widget)
        return widget

    def _get_search_input_widget(self) -> Input:
        return self._get_cached_widget(
            "search_input", lambda: self.query_one("#search-input", Input)
        )

    def _get_search_container_widget(self) -> Any:
        return self._get_cached_widget(
            "search_container", lambda: self.query_one("#search-container")
        )

    def _get_queue_table_widget(self) -> QueueTable:
        return self._get_cached_widget(
            "queue_table", lambda: self.query_one("#queue-table", QueueTable)
        )

    def _get_list_header_widget(self) -> Label:
        return self._get_cached_widget("list_header", lambda: self.query_one("#list-header", Label))

    def _get_empty_state_widget(self) -> Static:
        return self._get_cached_widget(
            "empty_state", lambda: self.query_one("#empty-state", Static)
        )

    def _get_status_bar_widget(self) -> Label:
        return self._get_cached_widget("status_bar", lambda: self.query_one("#status-bar", Label))

    def _get_footer_widget(self) -> ContextFooter:
        return self._get_cached_widget("footer", lambda: self.query_one(ContextFooter))

    def _prime_ui_refs(self) -> None:
        """Warm caches for frequently queried widgets once the DOM is mounted."""
        for getter in (
            self._get_search_input_widget,
            self._get_search_container_widget,
            self._get_queue_table_widget,
            self._get_list_header_widget,
            self._get_empty_state_widget,
            self._get_status_bar_widget,
            self._get_footer_widget,
        ):
            try:
                getter()
            except NoMatches:
                continue

    # ========================================================================
    # Background work
    # ========================================================================

    def _track_task(self, coro: Any) -> asyncio.Task[Any]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    async def _run_refresh(self) -> bool:
        """Refresh the snapshot, showing the loading state while in flight."""
        self.call_later(self._update_status_bar)
        applied = await self._store.refresh()
        self._update_status_bar()
        return applied

    def _poll_refresh(self) -> None:
        logger.debug("Auto-refresh tick")
        self._track_task(self._run_refresh())

    # ========================================================================
    # Store and dispatcher callbacks
    # ========================================================================

    def _on_snapshot_replaced(self, snapshot: Snapshot) -> None:
        logger.debug("Snapshot %d applied (%d entries)", snapshot.generation, len(snapshot.entries))
        try:
            self._ui_refresh.apply_view_refresh()
        except NoMatches:
            logger.debug("Snapshot applied while widgets are unavailable")

    def _on_fetch_failed(self, error: FetchFailed) -> None:
        self.notify(
            build_fetch_failure_message(error),
            title="Refresh",
            severity="error",
            timeout=8,
        )
        try:
            self._ui_refresh.apply_view_refresh()
        except NoMatches:
            logger.debug("Fetch failure reported while widgets are unavailable")

    def _report_failure(self, error: QueueError) -> None:
        title = "Queue server"
        if isinstance(error, RemoteMutationFailed):
            title = _FAILURE_TITLES.get(error.operation, title)
        elif isinstance(error, FetchFailed):
            title = "Channels"
        self.notify(build_failure_message(error), title=title, severity="error", timeout=8)

    # ========================================================================
    # Rendering
    # ========================================================================

    def _refresh_table(self) -> None:
        """Run the render pipeline over the current snapshot and repaint the table."""
        snapshot_entries = self._store.current()
        self._visible = render_entries(snapshot_entries, self._sort.state, self._filter.state)
        table = self._get_queue_table_widget()
        table.populate(
            self._visible,
            self._sort.state,
            query=self._filter.query,
            theme_name=self._config.theme_name,
        )
        empty_state = self._get_empty_state_widget()
        if self._visible:
            empty_state.remove_class("visible")
            table.display = True
        else:
            message = build_list_empty_message(
                total=len(snapshot_entries),
                query=self._filter.query,
                loading=self._store.loading or not self._store.generation,
            )
            empty_state.update(escape_rich_text(message))
            empty_state.add_class("visible")
            table.display = bool(snapshot_entries)

    def _update_list_header(self) -> None:
        total = len(self._store.current())
        shown = len(self._visible)
        label = f" Unwatched ({total})" if shown == total else f" Unwatched ({shown}/{total})"
        self._get_list_header_widget().update(label)
        self.sub_title = f"{total} videos · {self._connection.base_url}"

    def _update_status_bar(self) -> None:
        """Update the status bar with load state, counts, sort, and filter."""
        try:
            status = self._get_status_bar_widget()
        except NoMatches:
            return
        status.update(
            build_status_bar_text(
                total=len(self._store.current()),
                visible=len(self._visible),
                query=self._filter.query,
                sort_label=describe_sort(self._sort.state, SORT_KEY_LABELS),
                loading=self._store.loading,
                has_loaded=self._store.has_loaded,
                auto_refresh_minutes=self._config.auto_refresh_minutes,
            )
        )
        self._update_footer()

    def _is_search_visible(self) -> bool:
        return "visible" in self._get_search_container_widget().classes

    def _update_footer(self) -> None:
        try:
            footer = self._get_footer_widget()
            searching = self._is_search_visible()
        except NoMatches:
            return
        footer.render_bindings(SEARCH_FOOTER_BINDINGS if searching else DEFAULT_FOOTER_BINDINGS)

    # ========================================================================
    # Theme
    # ========================================================================

    def _apply_theme(self) -> None:
        """Point Rich markup colors and CSS variables at the configured theme."""
        if self._config.theme_name not in TEXTUAL_THEMES:
            self._config.theme_name = next(iter(TEXTUAL_THEMES))
        apply_theme_colors(self._config.theme_name)
        self.theme = self._config.theme_name

    def _save_config_or_warn(self, context: str) -> bool:
        """Save config and notify the user on failure."""
        if not save_config(self._config):
            self.notify(f"Failed to save {context}.", severity="warning")
            return False
        return True

    def action_cycle_theme(self) -> None:
        """Cycle through available color themes."""
        self._config.theme_name = next_theme_name(self._config.theme_name)
        self._apply_theme()
        self._ui_refresh.apply_view_refresh()
        self._save_config_or_warn("theme preference")
        self.notify(f"Theme: {self._config.theme_name}", title="Theme")

    # ========================================================================
    # Sorting
    # ========================================================================

    def action_sort_by(self, key: str) -> None:
        """Sort by ``key``; the active column flips direction instead."""
        if key not in SORT_KEYS:
            logger.warning("Ignoring sort request for unknown column %r", key)
            return
        self._sort.click(key)
        self._ui_refresh.apply_view_refresh()

    @on(DataTable.HeaderSelected, "#queue-table")
    def on_header_selected(self, event: DataTable.HeaderSelected) -> None:
        key = event.column_key.value
        if key is not None:
            self.action_sort_by(key)

    # ========================================================================
    # Search
    # ========================================================================

    def action_toggle_search(self) -> None:
        """Toggle search input visibility."""
        container = self._get_search_container_widget()
        if "visible" in container.classes:
            container.remove_class("visible")
            self._get_queue_table_widget().focus()
        else:
            container.add_class("visible")
            self._get_search_input_widget().focus()
        self._ui_refresh.apply_mode_refresh()

    def action_cancel_search(self) -> None:
        """Clear the search and hide the input."""
        container = self._get_search_container_widget()
        if "visible" not in container.classes and not self._filter.query:
            return
        container.remove_class("visible")
        self._cancel_search_timer()
        self._get_search_input_widget().value = ""
        self._pending_query = ""
        self._apply_filter("")
        self._get_queue_table_widget().focus()
        self._ui_refresh.apply_mode_refresh()

    @on(Input.Submitted, "#search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        """Apply the search immediately and return to the table."""
        self._cancel_search_timer()
        self._apply_filter(event.value)
        self._get_search_container_widget().remove_class("visible")
        self._get_queue_table_widget().focus()
        self._ui_refresh.apply_mode_refresh()

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        """Handle search input change with debouncing.

        Uses atomic swap pattern to avoid race conditions with timer callbacks.
        """
        self._pending_query = event.value
        self._cancel_search_timer()
        self._search_timer = self.set_timer(SEARCH_DEBOUNCE_DELAY, self._debounced_filter)

    def _cancel_search_timer(self) -> None:
        old_timer = self._search_timer
        self._search_timer = None
        if old_timer is not None:
            old_timer.stop()

    def _debounced_filter(self) -> None:
        """Apply filter after debounce delay."""
        self._search_timer = None
        self._apply_filter(self._pending_query)

    def _apply_filter(self, query: str) -> None:
        if query == self._filter.query:
            return
        self._filter.set_query(query)
        self._ui_refresh.apply_view_refresh()

    # ========================================================================
    # Queue actions
    # ========================================================================

    def _current_video_id(self) -> str | None:
        try:
            return self._get_queue_table_widget().current_video_id
        except NoMatches:
            return None

    def action_cursor_down(self) -> None:
        self._get_queue_table_widget().action_cursor_down()

    def action_cursor_up(self) -> None:
        self._get_queue_table_widget().action_cursor_up()

    def action_refresh(self) -> None:
        self._track_task(self._run_refresh())

    def action_watch(self) -> None:
        video_id = self._current_video_id()
        if video_id is None:
            return
        self._track_task(self._watch(video_id))

    def action_mark_watched(self) -> None:
        video_id = self._current_video_id()
        if video_id is None:
            return
        self._track_task(self._mark_watched(video_id))

    @on(DataTable.RowSelected, "#queue-table")
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        video_id = event.row_key.value
        if video_id is not None:
            self._track_task(self._watch(video_id))

    async def _watch(self, video_id: str) -> None:
        if await self._dispatcher.watch(video_id):
            self.notify(build_watched_notification(video_id), title="Watch")

    async def _mark_watched(self, video_id: str) -> None:
        if await self._dispatcher.delete(video_id):
            self.notify(build_marked_watched_notification(video_id), title="Mark watched")

    # ========================================================================
    # Channels
    # ========================================================================

    def action_add_channel(self) -> None:
        """Open the add-channel dialog bound to the dispatcher's draft."""
        draft = self._dispatcher.open_channel_dialog()

        def _on_result(channel_id: str | None) -> None:
            if channel_id is None:
                self._dispatcher.cancel_channel_dialog()
                return
            self.notify(build_channel_added_notification(channel_id), title="Add channel")

        self.push_screen(
            AddChannelModal(
                self._dispatcher.add_channel,
                initial_value=draft.channel_id,
                on_change=self._dispatcher.set_channel_draft,
            ),
            _on_result,
        )

    def action_channel_list(self) -> None:
        self._track_task(self._show_channel_list())

    async def _show_channel_list(self) -> None:
        channel_ids = await self._dispatcher.fetch_channel_ids()
        if channel_ids is None:
            return
        self.push_screen(ChannelListModal(channel_ids, self._config.theme_name))

    # ========================================================================
    # Help and command palette
    # ========================================================================

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_command_palette(self) -> None:
        """Open the fuzzy-searchable command palette."""

        def _on_command_selected(action_name: str | None) -> None:
            if not action_name:
                return
            self._track_task(self.run_action(action_name))

        self.push_screen(CommandPaletteModal(PALETTE_COMMANDS), _on_command_selected)


def main() -> int:
    """Main entry point wrapper for CLI/bootstrap logic."""
    return _cli_main(
        load_config_fn=load_config,
        configure_logging_fn=_configure_logging,
        configure_color_mode_fn=_configure_color_mode,
        validate_interactive_tty_fn=_validate_interactive_tty,
        app_factory=UnwatchedBrowser,
    )


if __name__ == "__main__":
    sys.exit(main())
