"""User commands against the queue server: mutate, then refresh on success."""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Awaitable, Callable

import httpx

from unwatched_browser.errors import FetchFailed, QueueError, RemoteMutationFailed
from unwatched_browser.models import DEFAULT_VIDEO_HOST, ChannelDraft
from unwatched_browser.parsing import build_watch_url
from unwatched_browser.services.interfaces import AppServices, QueueConnection
from unwatched_browser.snapshot import SnapshotStore

logger = logging.getLogger(__name__)

FailureReporter = Callable[[QueueError], None]


class ActionDispatcher:
    """Runs mark-watched, watch, and add-channel commands.

    Each command sends one request; a 2xx answer triggers exactly one
    snapshot refresh. Failures are caught here, logged, handed to the
    failure reporter, and turned into a ``False`` return value.
    """

    def __init__(
        self,
        *,
        services: AppServices,
        store: SnapshotStore,
        connection: QueueConnection,
        video_host: str = DEFAULT_VIDEO_HOST,
        report_failure: FailureReporter | None = None,
    ) -> None:
        self._services = services
        self._store = store
        self._connection = connection
        self._video_host = video_host
        self._report_failure = report_failure
        self._draft = ChannelDraft()

    # ------------------------------------------------------------------
    # Channel dialog state
    # ------------------------------------------------------------------

    @property
    def channel_draft(self) -> ChannelDraft:
        return self._draft

    def open_channel_dialog(self) -> ChannelDraft:
        self._draft.open()
        return self._draft

    def cancel_channel_dialog(self) -> ChannelDraft:
        self._draft.reset()
        return self._draft

    def set_channel_draft(self, value: str) -> None:
        """Record text typed into the add-channel dialog."""
        self._draft.channel_id = value

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def mark_watched(self, video_id: str) -> bool:
        return await self._mark(video_id, operation="mark_watched")

    async def delete(self, video_id: str) -> bool:
        """Remove an entry from the queue without opening it."""
        return await self.mark_watched(video_id)

    async def watch(self, video_id: str) -> bool:
        """Open the video externally, then mark it watched.

        The open is fire-and-forget; a failed mark is reported as a ``watch``
        failure so the user knows the video is still queued.
        """
        url = build_watch_url(video_id, self._video_host)
        try:
            self._services.opener.open(url)
        except (webbrowser.Error, OSError) as exc:
            logger.warning("Failed to open %s: %s", url, exc)
        return await self._mark(video_id, operation="watch")

    async def add_channel(self, channel_id: str | None = None) -> bool:
        """Submit the channel dialog. Blank input is ignored without a request."""
        if channel_id is not None:
            self._draft.channel_id = channel_id
        self._draft.dialog_open = True
        trimmed = self._draft.channel_id.strip()
        if not trimmed:
            logger.debug("Ignoring add-channel submit with empty id")
            return False

        async def _send() -> None:
            await self._services.queue_api.insert_channel(
                client=self._connection.client,
                base_url=self._connection.base_url,
                channel_id=trimmed,
                timeout_seconds=self._connection.timeout_seconds,
            )

        ok = await self._run_mutation("add_channel", trimmed, _send, refresh=False)
        if ok:
            self._draft.reset()
            await self._store.refresh()
        return ok

    async def fetch_channel_ids(self) -> list[str] | None:
        """List every crawled channel, or None after reporting a failure."""
        try:
            return await self._services.queue_api.fetch_channel_ids(
                client=self._connection.client,
                base_url=self._connection.base_url,
                timeout_seconds=self._connection.timeout_seconds,
            )
        except httpx.HTTPStatusError as exc:
            error = FetchFailed(
                f"Could not fetch channel ids: HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            )
            error.__cause__ = exc
        except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as exc:
            error = FetchFailed(f"Could not fetch channel ids: {exc}")
            error.__cause__ = exc
        logger.warning("%s", error)
        self._report(error)
        return None

    # ------------------------------------------------------------------
    # Command boundary
    # ------------------------------------------------------------------

    async def _mark(self, video_id: str, *, operation: str) -> bool:
        async def _send() -> None:
            await self._services.queue_api.set_video_watched(
                client=self._connection.client,
                base_url=self._connection.base_url,
                server_key=self._services.credentials.server_key(),
                video_id=video_id,
                timeout_seconds=self._connection.timeout_seconds,
            )

        return await self._run_mutation(operation, video_id, _send, refresh=True)

    async def _run_mutation(
        self,
        operation: str,
        target: str,
        send: Callable[[], Awaitable[None]],
        *,
        refresh: bool,
    ) -> bool:
        try:
            await send()
        except httpx.HTTPStatusError as exc:
            failure = RemoteMutationFailed(
                operation, target, status_code=exc.response.status_code
            )
            failure.__cause__ = exc
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            failure = RemoteMutationFailed(operation, target, reason=str(exc) or type(exc).__name__)
            failure.__cause__ = exc
        else:
            logger.debug("%s %s accepted", operation, target)
            if refresh:
                await self._store.refresh()
            return True
        logger.warning("%s", failure)
        self._report(failure)
        return False

    def _report(self, error: QueueError) -> None:
        if self._report_failure is not None:
            self._report_failure(error)


__all__ = [
    "ActionDispatcher",
    "FailureReporter",
]
