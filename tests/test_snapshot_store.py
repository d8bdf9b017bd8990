"""Tests for SnapshotStore refresh ordering and failure handling."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from unwatched_browser.errors import FetchFailed
from unwatched_browser.models import Snapshot
from unwatched_browser.snapshot import SnapshotStore


class GatedFetcher:
    """Fetcher whose calls block until the test releases them, one gate per call."""

    def __init__(self) -> None:
        self.gates: list[asyncio.Event] = []
        self.results: list[object] = []

    def queue(self, result: object) -> None:
        self.results.append(result)

    async def __call__(self):
        index = len(self.gates)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        result = self.results[index]
        if isinstance(result, BaseException):
            raise result
        return result


def _fetcher(result):
    async def _fetch():
        if isinstance(result, BaseException):
            raise result
        return result

    return _fetch


class TestRefresh:
    @pytest.mark.asyncio
    async def test_initial_state_is_empty(self):
        store = SnapshotStore(_fetcher([]))
        assert store.snapshot == Snapshot()
        assert store.current() == ()
        assert store.generation == 0
        assert store.loading is False
        assert store.has_loaded is False

    @pytest.mark.asyncio
    async def test_success_replaces_snapshot_and_notifies(self, sample_entries):
        replaced: list[Snapshot] = []
        store = SnapshotStore(_fetcher(sample_entries), on_replace=replaced.append)

        assert await store.refresh() is True

        assert store.current() == tuple(sample_entries)
        assert store.snapshot.generation == 1
        assert store.has_loaded is True
        assert replaced == [store.snapshot]

    @pytest.mark.asyncio
    async def test_empty_result_is_a_valid_snapshot(self):
        store = SnapshotStore(_fetcher([]))
        assert await store.refresh() is True
        assert store.current() == ()
        assert store.has_loaded is True

    @pytest.mark.asyncio
    async def test_loading_flag_while_in_flight(self, sample_entries):
        fetcher = GatedFetcher()
        fetcher.queue(sample_entries)
        store = SnapshotStore(fetcher)

        task = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        assert store.loading is True

        fetcher.gates[0].set()
        await task
        assert store.loading is False


class TestRefreshOrdering:
    @pytest.mark.asyncio
    async def test_late_older_response_is_discarded(self, make_entry):
        old = [make_entry("old")]
        new = [make_entry("new")]
        fetcher = GatedFetcher()
        fetcher.queue(old)
        fetcher.queue(new)
        replaced: list[Snapshot] = []
        store = SnapshotStore(fetcher, on_replace=replaced.append)

        first = asyncio.create_task(store.refresh())
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        assert len(fetcher.gates) == 2

        fetcher.gates[1].set()
        assert await second is True
        fetcher.gates[0].set()
        assert await first is False

        assert [entry.video_id for entry in store.current()] == ["new"]
        assert store.snapshot.generation == 2
        assert len(replaced) == 1

    @pytest.mark.asyncio
    async def test_superseded_success_keeps_loading_for_latest(self, make_entry):
        fetcher = GatedFetcher()
        fetcher.queue([make_entry("old")])
        fetcher.queue([make_entry("new")])
        store = SnapshotStore(fetcher)

        first = asyncio.create_task(store.refresh())
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        fetcher.gates[0].set()
        assert await first is False
        assert store.loading is True
        assert store.current() == ()

        fetcher.gates[1].set()
        assert await second is True
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_superseded_failure_is_not_reported(self, make_entry, caplog):
        fetcher = GatedFetcher()
        fetcher.queue(httpx.ConnectError("boom"))
        fetcher.queue([make_entry("new")])
        errors: list[FetchFailed] = []
        store = SnapshotStore(fetcher, on_error=errors.append)

        first = asyncio.create_task(store.refresh())
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        with caplog.at_level(logging.DEBUG, logger="unwatched_browser.snapshot"):
            fetcher.gates[0].set()
            assert await first is False
        fetcher.gates[1].set()
        assert await second is True

        assert errors == []
        assert "superseded" in caplog.text
        assert [entry.video_id for entry in store.current()] == ["new"]


class TestRefreshFailure:
    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self, sample_entries, status_error):
        results = [sample_entries, status_error(503)]

        async def _fetch():
            result = results.pop(0)
            if isinstance(result, BaseException):
                raise result
            return result

        errors: list[FetchFailed] = []
        store = SnapshotStore(_fetch, on_error=errors.append)

        assert await store.refresh() is True
        previous = store.snapshot
        assert await store.refresh() is False

        assert store.snapshot is previous
        assert store.loading is False
        assert len(errors) == 1
        assert errors[0].status_code == 503
        assert isinstance(errors[0].__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_transport_error_reported_without_status(self):
        errors: list[FetchFailed] = []
        store = SnapshotStore(_fetcher(httpx.ConnectError("refused")), on_error=errors.append)

        assert await store.refresh() is False

        assert errors[0].status_code is None
        assert "refused" in str(errors[0])
        assert store.has_loaded is False

    @pytest.mark.asyncio
    async def test_unsendable_url_clears_loading_and_reports(self):
        errors: list[FetchFailed] = []
        store = SnapshotStore(_fetcher(httpx.InvalidURL("Invalid port")), on_error=errors.append)

        assert await store.refresh() is False

        assert store.loading is False
        assert isinstance(errors[0].__cause__, httpx.InvalidURL)

    @pytest.mark.asyncio
    async def test_malformed_payload_is_a_fetch_failure(self):
        errors: list[FetchFailed] = []
        store = SnapshotStore(_fetcher(ValueError("bad payload")), on_error=errors.append)

        assert await store.refresh() is False
        assert isinstance(errors[0], FetchFailed)

    @pytest.mark.asyncio
    async def test_failure_without_callback_is_logged(self, caplog):
        store = SnapshotStore(_fetcher(OSError("network down")))

        with caplog.at_level(logging.WARNING, logger="unwatched_browser.snapshot"):
            assert await store.refresh() is False

        assert "network down" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        store = SnapshotStore(_fetcher(RuntimeError("bug")))
        with pytest.raises(RuntimeError):
            await store.refresh()
