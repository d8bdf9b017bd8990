"""Generation-guarded local copy of the server's unwatched collection."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

import httpx

from unwatched_browser.errors import FetchFailed, status_code_of
from unwatched_browser.models import Entry, Snapshot

logger = logging.getLogger(__name__)

EntryFetcher = Callable[[], Awaitable[Sequence[Entry]]]


class SnapshotStore:
    """Holds the latest accepted Snapshot and refreshes it from the server.

    Every ``refresh()`` call takes a new generation number. A response is
    applied only when its generation is still the newest one issued, so a
    slow earlier request can never overwrite the result of a later one.
    """

    def __init__(
        self,
        fetch: EntryFetcher,
        *,
        on_replace: Callable[[Snapshot], None] | None = None,
        on_error: Callable[[FetchFailed], None] | None = None,
    ) -> None:
        self._fetch = fetch
        self._on_replace = on_replace
        self._on_error = on_error
        self._snapshot = Snapshot()
        self._issued = 0
        self._loading_generation: int | None = None
        self._has_loaded = False

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        """Number of the most recently issued refresh."""
        return self._issued

    @property
    def loading(self) -> bool:
        return self._loading_generation is not None

    @property
    def has_loaded(self) -> bool:
        return self._has_loaded

    def current(self) -> tuple[Entry, ...]:
        return self._snapshot.entries

    def _is_latest(self, generation: int) -> bool:
        return generation == self._issued

    async def refresh(self) -> bool:
        """Re-read the collection. Returns True when a new Snapshot was applied."""
        self._issued += 1
        generation = self._issued
        self._loading_generation = generation
        try:
            entries = await self._fetch()
        except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as exc:
            error = FetchFailed(
                f"Could not fetch unwatched videos: {exc}", status_code=status_code_of(exc)
            )
            error.__cause__ = exc
            if not self._is_latest(generation):
                logger.debug("Ignoring failure of superseded refresh %d: %s", generation, exc)
                return False
            self._loading_generation = None
            logger.warning("Refresh %d failed: %s", generation, exc, exc_info=True)
            if self._on_error is not None:
                self._on_error(error)
            return False

        if not self._is_latest(generation):
            logger.debug(
                "Discarding %d entries from superseded refresh %d (latest is %d)",
                len(entries),
                generation,
                self._issued,
            )
            return False

        self._loading_generation = None
        self._snapshot = Snapshot(entries=tuple(entries), generation=generation)
        self._has_loaded = True
        logger.debug("Refresh %d applied %d entries", generation, len(entries))
        if self._on_replace is not None:
            self._on_replace(self._snapshot)
        return True


__all__ = [
    "EntryFetcher",
    "SnapshotStore",
]
