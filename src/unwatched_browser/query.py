"""Filtering, sorting, and the render pipeline over queue entries."""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Iterable

from rich.markup import escape as escape_markup

from unwatched_browser.collation import compare
from unwatched_browser.models import (
    SORT_ASCENDING,
    SORT_DESCENDING,
    SORT_KEYS,
    Entry,
    FilterState,
    SortState,
)

EntryPredicate = Callable[[Entry], bool]
EntryComparator = Callable[[Entry, Entry], int]

# Fields searched by the filter box (logical OR)
FILTER_FIELDS = ("channel_id", "title", "published_at")

# ============================================================================
# Text Formatting Utilities
# ============================================================================


def truncate_text(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate text to max_len characters, adding suffix if truncated."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + suffix


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


_HIGHLIGHT_PATTERN_CACHE: dict[str, re.Pattern[str]] = {}


def highlight_text(text: str, query: str, color: str) -> str:
    """Escape ``text`` and wrap case-insensitive matches of ``query`` in Rich markup."""
    if not text:
        return text
    needle = query.strip()
    if not needle:
        return escape_rich_text(text)
    pattern = _HIGHLIGHT_PATTERN_CACHE.get(needle.lower())
    if pattern is None:
        pattern = re.compile(re.escape(needle), re.IGNORECASE)
        _HIGHLIGHT_PATTERN_CACHE[needle.lower()] = pattern
    parts: list[str] = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(escape_rich_text(text[last : match.start()]))
        parts.append(f"[bold {color}]{escape_rich_text(match.group(0))}[/]")
        last = match.end()
    parts.append(escape_rich_text(text[last:]))
    return "".join(parts)


# ============================================================================
# Filtering
# ============================================================================


def compile_filter(query: str) -> EntryPredicate:
    """Compile a search string into a predicate over entries.

    Matching is a case-insensitive substring test against the channel id,
    title, and publish timestamp. A blank query matches everything.
    """
    needle = query.strip().casefold()
    if not needle:
        return lambda entry: True

    def _matches(entry: Entry) -> bool:
        return any(needle in getattr(entry, name).casefold() for name in FILTER_FIELDS)

    return _matches


def filter_entries(entries: Iterable[Entry], filter_state: FilterState) -> list[Entry]:
    """Return entries accepted by the filter, in their original order."""
    predicate = compile_filter(filter_state.query)
    return [entry for entry in entries if predicate(entry)]


class FilterController:
    """Holds the search string typed by the user."""

    def __init__(self, query: str = "") -> None:
        self._state = FilterState(query=query)

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def query(self) -> str:
        return self._state.query

    def set_query(self, query: str) -> FilterState:
        self._state = FilterState(query=query)
        return self._state

    def clear(self) -> FilterState:
        return self.set_query("")

    def predicate(self) -> EntryPredicate:
        return compile_filter(self._state.query)


# ============================================================================
# Sorting
# ============================================================================


def flip_direction(direction: str) -> str:
    return SORT_DESCENDING if direction == SORT_ASCENDING else SORT_ASCENDING


def next_sort_state(current: SortState, clicked_key: str) -> SortState:
    """Apply a header click: same column flips direction, new column sorts ascending."""
    if clicked_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {clicked_key!r}")
    if current.key == clicked_key:
        return SortState(key=clicked_key, direction=flip_direction(current.direction))
    return SortState(key=clicked_key, direction=SORT_ASCENDING)


def entry_comparator(sort_state: SortState) -> EntryComparator:
    """Build a three-way comparator for the given sort state.

    Descending order swaps the operands before comparing instead of negating
    the ascending result.
    """
    key = sort_state.key
    if key is None:
        return lambda a, b: 0
    descending = sort_state.direction == SORT_DESCENDING

    def _compare(a: Entry, b: Entry) -> int:
        if descending:
            a, b = b, a
        return compare(getattr(a, key), getattr(b, key))

    return _compare


def sort_entries(entries: Iterable[Entry], sort_state: SortState) -> list[Entry]:
    """Stable-sort entries by the active column, returning a new list."""
    if sort_state.key is None:
        return list(entries)
    return sorted(entries, key=functools.cmp_to_key(entry_comparator(sort_state)))


class SortController:
    """Click-to-toggle state machine over the active sort column."""

    def __init__(self, initial: SortState | None = None) -> None:
        self._state = initial or SortState()

    @property
    def state(self) -> SortState:
        return self._state

    def click(self, key: str) -> SortState:
        """Handle a click on the header for ``key`` and return the new state."""
        self._state = next_sort_state(self._state, key)
        return self._state

    def comparator(self) -> EntryComparator:
        return entry_comparator(self._state)


# ============================================================================
# Render Pipeline
# ============================================================================


def render_entries(
    entries: Iterable[Entry], sort_state: SortState, filter_state: FilterState
) -> list[Entry]:
    """Turn snapshot entries into the displayed sequence: filter, then stable sort.

    The input is never mutated; the result is always a fresh list.
    """
    return sort_entries(filter_entries(entries, filter_state), sort_state)


def describe_sort(sort_state: SortState, labels: dict[str, str]) -> str:
    """Human-readable sort description, e.g. ``Date ▲``."""
    if sort_state.key is None:
        return "unsorted"
    arrow = "▲" if sort_state.direction == SORT_ASCENDING else "▼"
    return f"{labels.get(sort_state.key, sort_state.key)} {arrow}"


__all__ = [
    "FILTER_FIELDS",
    "_HIGHLIGHT_PATTERN_CACHE",
    "EntryComparator",
    "EntryPredicate",
    "FilterController",
    "SortController",
    "compile_filter",
    "describe_sort",
    "entry_comparator",
    "escape_rich_text",
    "filter_entries",
    "flip_direction",
    "highlight_text",
    "next_sort_state",
    "render_entries",
    "sort_entries",
    "truncate_text",
]
