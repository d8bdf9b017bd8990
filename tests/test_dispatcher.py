"""Tests for ActionDispatcher commands and their refresh behavior."""

from __future__ import annotations

import asyncio
import webbrowser

import httpx
import pytest

from unwatched_browser.dispatcher import ActionDispatcher
from unwatched_browser.errors import FetchFailed, QueueError, RemoteMutationFailed
from unwatched_browser.services.interfaces import QueueConnection, bind_unwatched_fetcher
from unwatched_browser.snapshot import SnapshotStore


@pytest.fixture
def failures() -> list[QueueError]:
    return []


@pytest.fixture
def connection() -> QueueConnection:
    return QueueConnection(base_url="http://queue.test", timeout_seconds=5)


@pytest.fixture
def store(fake_queue_api, connection) -> SnapshotStore:
    return SnapshotStore(bind_unwatched_fetcher(fake_queue_api, connection))


@pytest.fixture
def dispatcher(fake_services, store, connection, failures) -> ActionDispatcher:
    return ActionDispatcher(
        services=fake_services,
        store=store,
        connection=connection,
        video_host="videos.example",
        report_failure=failures.append,
    )


def _ids(store: SnapshotStore) -> list[str]:
    return [entry.video_id for entry in store.current()]


class TestMarkWatched:
    @pytest.mark.asyncio
    async def test_success_refreshes_exactly_once(self, dispatcher, store, fake_queue_api):
        await store.refresh()
        fake_queue_api.calls.clear()

        assert await dispatcher.mark_watched("v2") is True

        assert fake_queue_api.calls_to("set_video_watched") == [
            {"server_key": "test-key", "video_id": "v2"}
        ]
        assert len(fake_queue_api.calls_to("fetch_unwatched")) == 1
        assert _ids(store) == ["v1", "v3"]

    @pytest.mark.asyncio
    async def test_http_error_reports_status_and_skips_refresh(
        self, dispatcher, store, fake_queue_api, failures, status_error
    ):
        await store.refresh()
        before = store.snapshot
        fake_queue_api.failures["set_video_watched"] = status_error(500)
        fake_queue_api.calls.clear()

        assert await dispatcher.mark_watched("v1") is False

        assert fake_queue_api.calls_to("fetch_unwatched") == []
        assert store.snapshot is before
        assert len(failures) == 1
        failure = failures[0]
        assert isinstance(failure, RemoteMutationFailed)
        assert failure.operation == "mark_watched"
        assert failure.target == "v1"
        assert failure.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_reports_reason(self, dispatcher, fake_queue_api, failures):
        fake_queue_api.failures["set_video_watched"] = httpx.ConnectError("connection refused")

        assert await dispatcher.mark_watched("v1") is False

        assert failures[0].status_code is None
        assert failures[0].reason == "connection refused"
        assert isinstance(failures[0].__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_url_is_reported(self, dispatcher, fake_queue_api, failures):
        fake_queue_api.failures["set_video_watched"] = httpx.InvalidURL("Invalid port")

        assert await dispatcher.mark_watched("v1") is False

        assert failures[0].status_code is None
        assert failures[0].reason == "Invalid port"

    @pytest.mark.asyncio
    async def test_delete_is_mark_watched_without_opening(
        self, dispatcher, fake_queue_api, fake_opener
    ):
        assert await dispatcher.delete("v3") is True
        assert fake_opener.opened == []
        assert fake_queue_api.calls_to("set_video_watched")[0]["video_id"] == "v3"


class TestRefreshOrderingAcrossCommands:
    @pytest.mark.asyncio
    async def test_late_manual_refresh_loses_to_mark_watched_refresh(
        self, fake_services, fake_queue_api, connection, failures
    ):
        fetch = bind_unwatched_fetcher(fake_queue_api, connection)
        stale_payload = list(fake_queue_api.entries)
        gate = asyncio.Event()
        calls = 0

        async def _fetch():
            nonlocal calls
            calls += 1
            if calls == 1:
                await gate.wait()
                return stale_payload
            return await fetch()

        store = SnapshotStore(_fetch)
        dispatcher = ActionDispatcher(
            services=fake_services,
            store=store,
            connection=connection,
            report_failure=failures.append,
        )

        manual = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        assert store.loading is True

        assert await dispatcher.mark_watched("v1") is True
        assert _ids(store) == ["v2", "v3"]
        assert store.snapshot.generation == 2

        gate.set()
        assert await manual is False

        assert _ids(store) == ["v2", "v3"]
        assert store.snapshot.generation == 2
        assert store.loading is False
        assert failures == []


class TestWatch:
    @pytest.mark.asyncio
    async def test_opens_video_then_marks_watched(self, dispatcher, fake_queue_api, fake_opener):
        assert await dispatcher.watch("v1") is True

        assert fake_opener.opened == ["https://videos.example/watch?v=v1"]
        names = [name for name, _ in fake_queue_api.calls]
        assert names == ["set_video_watched", "fetch_unwatched"]

    @pytest.mark.asyncio
    async def test_failed_mark_is_reported_as_watch(
        self, dispatcher, fake_queue_api, fake_opener, failures, status_error
    ):
        fake_queue_api.failures["set_video_watched"] = status_error(503)

        assert await dispatcher.watch("v1") is False

        assert fake_opener.opened == ["https://videos.example/watch?v=v1"]
        assert failures[0].operation == "watch"
        assert fake_queue_api.calls_to("fetch_unwatched") == []

    @pytest.mark.asyncio
    async def test_opener_failure_still_marks_watched(
        self, dispatcher, fake_queue_api, fake_opener, failures
    ):
        fake_opener.error = webbrowser.Error("no browser")

        assert await dispatcher.watch("v1") is True

        assert failures == []
        assert len(fake_queue_api.calls_to("set_video_watched")) == 1

    @pytest.mark.asyncio
    async def test_video_id_is_url_quoted(self, dispatcher, fake_opener):
        await dispatcher.watch("a&b")
        assert fake_opener.opened == ["https://videos.example/watch?v=a%26b"]


class TestAddChannel:
    @pytest.mark.asyncio
    async def test_success_resets_draft_and_refreshes(self, dispatcher, fake_queue_api):
        dispatcher.open_channel_dialog()
        dispatcher.set_channel_draft("  UCabc ")

        assert await dispatcher.add_channel() is True

        assert fake_queue_api.calls_to("insert_channel") == [{"channel_id": "UCabc"}]
        assert len(fake_queue_api.calls_to("fetch_unwatched")) == 1
        assert dispatcher.channel_draft.channel_id == ""
        assert dispatcher.channel_draft.dialog_open is False

    @pytest.mark.asyncio
    async def test_blank_value_sends_nothing(self, dispatcher, fake_queue_api, failures):
        dispatcher.open_channel_dialog()

        assert await dispatcher.add_channel("   ") is False

        assert fake_queue_api.calls == []
        assert failures == []
        assert dispatcher.channel_draft.dialog_open is True

    @pytest.mark.asyncio
    async def test_failure_keeps_draft_open_with_value(
        self, dispatcher, fake_queue_api, failures, status_error
    ):
        fake_queue_api.failures["insert_channel"] = status_error(400)

        assert await dispatcher.add_channel("UCabc") is False

        draft = dispatcher.channel_draft
        assert (draft.channel_id, draft.dialog_open) == ("UCabc", True)
        assert failures[0].operation == "add_channel"
        assert failures[0].status_code == 400
        assert fake_queue_api.calls_to("fetch_unwatched") == []

    def test_cancel_resets_draft(self, dispatcher):
        dispatcher.open_channel_dialog()
        dispatcher.set_channel_draft("UCpartial")

        draft = dispatcher.cancel_channel_dialog()

        assert (draft.channel_id, draft.dialog_open) == ("", False)


class TestFetchChannelIds:
    @pytest.mark.asyncio
    async def test_returns_ids(self, dispatcher, fake_queue_api):
        fake_queue_api.channel_ids = ["UCa", "UCb"]
        assert await dispatcher.fetch_channel_ids() == ["UCa", "UCb"]

    @pytest.mark.asyncio
    async def test_failure_reports_and_returns_none(
        self, dispatcher, fake_queue_api, failures, status_error
    ):
        fake_queue_api.failures["fetch_channel_ids"] = status_error(502)

        assert await dispatcher.fetch_channel_ids() is None

        assert isinstance(failures[0], FetchFailed)
        assert failures[0].status_code == 502


@pytest.mark.asyncio
async def test_missing_reporter_does_not_raise(fake_services, store, connection, status_error):
    fake_services.queue_api.failures["set_video_watched"] = status_error(500)
    dispatcher = ActionDispatcher(services=fake_services, store=store, connection=connection)
    assert await dispatcher.mark_watched("v1") is False


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(dispatcher, fake_queue_api):
    fake_queue_api.failures["set_video_watched"] = RuntimeError("bug")
    with pytest.raises(RuntimeError):
        await dispatcher.mark_watched("v1")
