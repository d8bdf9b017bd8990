"""CLI/bootstrap helpers for the unwatched queue browser."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from typing import Any, TextIO

import httpx

from unwatched_browser.action_messages import (
    build_actionable_error,
    build_fetch_failure_message,
    build_list_empty_message,
)
from unwatched_browser.config import get_config_dir, load_config
from unwatched_browser.errors import FetchFailed
from unwatched_browser.models import (
    MAX_REQUEST_TIMEOUT_SECONDS,
    SORT_DESCENDING,
    SORT_KEYS,
    Entry,
    FilterState,
    SortState,
    UserConfig,
)
from unwatched_browser.parsing import normalize_base_url
from unwatched_browser.query import render_entries
from unwatched_browser.services.queue_api_service import fetch_unwatched

logger = logging.getLogger(__name__)

LIST_COLUMNS = ("video_id", "published_at", "channel_id", "title")


def _fetch_entries_once(config: UserConfig) -> list[Entry]:
    """Fetch the unwatched collection once, outside of the TUI event loop."""
    return asyncio.run(
        fetch_unwatched(
            client=None,
            base_url=config.api_base_url,
            timeout_seconds=config.request_timeout_seconds,
        )
    )


def _tsv_cell(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def _print_entries(entries: list[Entry], out: TextIO) -> None:
    for entry in entries:
        print("\t".join(_tsv_cell(getattr(entry, name)) for name in LIST_COLUMNS), file=out)


def _run_list_mode(
    config: UserConfig,
    sort_state: SortState,
    filter_state: FilterState,
    fetch_entries_fn: Callable[[UserConfig], list[Entry]],
) -> int:
    """Print the rendered queue as TSV rows. Returns exit code."""
    try:
        entries = fetch_entries_fn(config)
    except httpx.HTTPStatusError as exc:
        error = FetchFailed(str(exc), status_code=exc.response.status_code)
        print(build_fetch_failure_message(error), file=sys.stderr)
        return 1
    except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
        logger.warning("List fetch failed: %s", exc)
        print(build_fetch_failure_message(FetchFailed(str(exc))), file=sys.stderr)
        return 1
    except ValueError as exc:
        print(
            build_actionable_error(
                "read the unwatched list",
                why=f"the server sent an unexpected payload ({exc})",
                next_step="check --api-url points at the queue server",
            ),
            file=sys.stderr,
        )
        return 1

    rows = render_entries(entries, sort_state, filter_state)
    if not rows:
        print(
            build_list_empty_message(total=len(entries), query=filter_state.query),
            file=sys.stderr,
        )
        return 0
    _print_entries(rows, sys.stdout)
    return 0


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = get_config_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse and clear your queue of unwatched videos in a TUI"
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Queue server base URL (default: config value, http://127.0.0.1:8080)",
    )
    parser.add_argument(
        "--sort",
        choices=SORT_KEYS,
        default=None,
        help="Initial sort column (default: config value, published_at)",
    )
    parser.add_argument(
        "--descending",
        action="store_true",
        help="Start with the sort column in descending order",
    )
    parser.add_argument(
        "--filter",
        type=str,
        default="",
        help="Initial search text (matches channel, title, and date)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help=f"HTTP request timeout in seconds (1-{MAX_REQUEST_TIMEOUT_SECONDS})",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the queue as tab-separated rows and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/unwatched-browser/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    return parser


def _apply_overrides(args: argparse.Namespace, config: UserConfig) -> int | None:
    """Apply CLI overrides to ``config`` in place. Returns an exit code on bad input."""
    if args.api_url is not None:
        try:
            config.api_base_url = normalize_base_url(args.api_url)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    if args.timeout is not None:
        if not 1 <= args.timeout <= MAX_REQUEST_TIMEOUT_SECONDS:
            print(
                f"Error: --timeout must be between 1 and {MAX_REQUEST_TIMEOUT_SECONDS} seconds",
                file=sys.stderr,
            )
            return 1
        config.request_timeout_seconds = args.timeout
    return None


def _initial_sort_state(args: argparse.Namespace, config: UserConfig) -> SortState:
    """``--sort`` alone starts ascending; without it the config default applies."""
    if args.sort is None:
        base = config.initial_sort_state()
        if args.descending:
            return SortState(key=base.key, direction=SORT_DESCENDING)
        return base
    if args.descending:
        return SortState(key=args.sort, direction=SORT_DESCENDING)
    return SortState(key=args.sort)


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    fetch_entries_fn: Callable[[UserConfig], list[Entry]] = _fetch_entries_once,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("unwatched-viewer starting, argv=%s", argv)

    config = load_config_fn()
    exit_code = _apply_overrides(args, config)
    if exit_code is not None:
        return exit_code

    sort_state = _initial_sort_state(args, config)
    filter_state = FilterState(query=args.filter)

    if args.list:
        return _run_list_mode(config, sort_state, filter_state, fetch_entries_fn)

    if not validate_interactive_tty_fn():
        print(
            "Error: unwatched-viewer requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run unwatched-viewer directly in a terminal session", file=sys.stderr)
        print("  - Use --list for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from unwatched_browser.app import UnwatchedBrowser as _UnwatchedBrowser

        app_factory = _UnwatchedBrowser

    app = app_factory(
        config=config,
        sort_state=sort_state,
        initial_query=filter_state.query,
    )
    app.run()
    return 0


__all__ = [
    "LIST_COLUMNS",
    "_apply_overrides",
    "_configure_color_mode",
    "_configure_logging",
    "_fetch_entries_once",
    "_initial_sort_state",
    "_run_list_mode",
    "_validate_interactive_tty",
    "main",
]
