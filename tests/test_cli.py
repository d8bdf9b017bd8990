"""Tests for CLI argument handling, list mode, and bootstrap wiring."""

from __future__ import annotations

import logging
import logging.handlers
import os
from unittest.mock import MagicMock, patch

import httpx
import pytest

from unwatched_browser.cli import (
    _configure_color_mode,
    _configure_logging,
    _fetch_entries_once,
    _run_list_mode,
    main,
)
from unwatched_browser.models import (
    SORT_ASCENDING,
    SORT_DESCENDING,
    FilterState,
    SortState,
    UserConfig,
)


def _run_main(argv, *, config=None, entries=None, fetch_error=None, tty=True, app_factory=None):
    config = config or UserConfig()

    def _fetch(_config):
        if fetch_error is not None:
            raise fetch_error
        return list(entries or [])

    return main(
        argv,
        load_config_fn=lambda: config,
        fetch_entries_fn=_fetch,
        configure_logging_fn=lambda debug: None,
        configure_color_mode_fn=lambda mode: None,
        validate_interactive_tty_fn=lambda: tty,
        app_factory=app_factory or MagicMock(),
    )


class TestListMode:
    def test_prints_rendered_rows_as_tsv(self, sample_entries, capsys):
        exit_code = _run_main(["--list", "--sort", "title"], entries=sample_entries)

        assert exit_code == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split("\t")[0] for line in lines] == ["v2", "v1", "v3"]
        assert lines[0].split("\t") == ["v2", "2024-01-01T09:00:00Z", "C2", "alpha"]

    def test_filter_and_descending(self, sample_entries, capsys):
        exit_code = _run_main(
            ["--list", "--filter", "C1", "--sort", "published_at", "--descending"],
            entries=sample_entries,
        )

        assert exit_code == 0
        assert [line.split("\t")[0] for line in capsys.readouterr().out.splitlines()] == [
            "v3",
            "v1",
        ]

    def test_tabs_and_newlines_flattened(self, make_entry, capsys):
        entry = make_entry(title="a\tb\nc")
        _run_main(["--list"], entries=[entry])
        assert capsys.readouterr().out.strip().split("\t")[-1] == "a b c"

    def test_empty_queue_message_on_stderr(self, capsys):
        assert _run_main(["--list"], entries=[]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No unwatched videos" in captured.err

    def test_no_match_message(self, sample_entries, capsys):
        assert _run_main(["--list", "--filter", "zzz"], entries=sample_entries) == 0
        assert "No videos match 'zzz'" in capsys.readouterr().err

    def test_http_failure_exit_code(self, capsys, status_error):
        assert _run_main(["--list"], fetch_error=status_error(503)) == 1
        assert "HTTP 503" in capsys.readouterr().err

    def test_transport_failure_exit_code(self, capsys):
        assert _run_main(["--list"], fetch_error=httpx.ConnectError("refused")) == 1
        assert "could not be reached" in capsys.readouterr().err

    def test_invalid_url_at_send_time_exit_code(self, capsys):
        assert _run_main(["--list"], fetch_error=httpx.InvalidURL("Invalid port")) == 1
        assert "could not be reached" in capsys.readouterr().err

    def test_bad_payload_exit_code(self, capsys):
        assert _run_main(["--list"], fetch_error=ValueError("not a list")) == 1
        assert "unexpected payload" in capsys.readouterr().err

    def test_run_list_mode_directly(self, sample_entries, capsys):
        exit_code = _run_list_mode(
            UserConfig(),
            SortState(key=None),
            FilterState(""),
            lambda config: sample_entries,
        )
        assert exit_code == 0
        assert len(capsys.readouterr().out.splitlines()) == 3


class TestOverrides:
    def test_api_url_override_reaches_fetch(self, capsys):
        seen: list[UserConfig] = []

        def _fetch(config):
            seen.append(config)
            return []

        main(
            ["--list", "--api-url", "http://other:9000/", "--timeout", "30"],
            load_config_fn=UserConfig,
            fetch_entries_fn=_fetch,
            configure_logging_fn=lambda debug: None,
            configure_color_mode_fn=lambda mode: None,
        )

        assert seen[0].api_base_url == "http://other:9000"
        assert seen[0].request_timeout_seconds == 30

    def test_invalid_api_url(self, capsys):
        assert _run_main(["--api-url", "nonsense"]) == 1
        assert "Invalid API base URL" in capsys.readouterr().err

    def test_out_of_range_port_rejected_before_fetch(self, capsys):
        fetched: list[UserConfig] = []
        exit_code = main(
            ["--list", "--api-url", "http://127.0.0.1:99999"],
            load_config_fn=UserConfig,
            fetch_entries_fn=fetched.append,
            configure_logging_fn=lambda debug: None,
            configure_color_mode_fn=lambda mode: None,
        )

        assert exit_code == 1
        assert fetched == []
        assert "Invalid API base URL" in capsys.readouterr().err

    @pytest.mark.parametrize("timeout", ["0", "121"])
    def test_timeout_out_of_range(self, timeout, capsys):
        assert _run_main(["--timeout", timeout]) == 1
        assert "--timeout" in capsys.readouterr().err


class TestInteractiveLaunch:
    def test_requires_tty(self, capsys):
        factory = MagicMock()
        assert _run_main([], tty=False, app_factory=factory) == 2
        factory.assert_not_called()
        assert "interactive TTY" in capsys.readouterr().err

    def test_builds_and_runs_app(self):
        factory = MagicMock()
        config = UserConfig(default_sort_key="title", default_sort_direction=SORT_DESCENDING)

        assert _run_main(["--filter", "news"], config=config, app_factory=factory) == 0

        factory.assert_called_once_with(
            config=config,
            sort_state=SortState("title", SORT_DESCENDING),
            initial_query="news",
        )
        factory.return_value.run.assert_called_once_with()

    def test_sort_flag_starts_ascending(self):
        factory = MagicMock()
        config = UserConfig(default_sort_direction=SORT_DESCENDING)
        _run_main(["--sort", "channel_id"], config=config, app_factory=factory)
        assert factory.call_args.kwargs["sort_state"] == SortState("channel_id", SORT_ASCENDING)

    def test_descending_flips_config_default(self):
        factory = MagicMock()
        _run_main(["--descending"], app_factory=factory)
        assert factory.call_args.kwargs["sort_state"] == SortState(
            "published_at", SORT_DESCENDING
        )

    def test_no_color_overrides_color_flag(self):
        modes: list[str] = []
        main(
            ["--color", "always", "--no-color"],
            load_config_fn=UserConfig,
            configure_logging_fn=lambda debug: None,
            configure_color_mode_fn=modes.append,
            validate_interactive_tty_fn=lambda: True,
            app_factory=MagicMock(),
        )
        assert modes == ["never"]


class TestConfigureColorMode:
    def test_never_sets_no_color(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "1")
        monkeypatch.setenv("NO_COLOR", "0")
        _configure_color_mode("never")
        assert os.environ["NO_COLOR"] == "1"
        assert "FORCE_COLOR" not in os.environ

    def test_always_sets_force_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "0")
        _configure_color_mode("always")
        assert os.environ["FORCE_COLOR"] == "1"
        assert "NO_COLOR" not in os.environ


class TestConfigureLogging:
    def test_disabled_without_debug(self):
        try:
            _configure_logging(False)
            assert logging.root.manager.disable == logging.CRITICAL
        finally:
            logging.disable(logging.NOTSET)

    def test_debug_adds_rotating_file_handler(self, tmp_path):
        before = list(logging.root.handlers)
        old_level = logging.root.level
        try:
            with patch("unwatched_browser.cli.get_config_dir", return_value=tmp_path):
                _configure_logging(True)
            added = [h for h in logging.root.handlers if h not in before]
            assert len(added) == 1
            assert isinstance(added[0], logging.handlers.RotatingFileHandler)
            assert added[0].baseFilename == str(tmp_path / "debug.log")
            assert logging.root.level == logging.DEBUG
        finally:
            for handler in [h for h in logging.root.handlers if h not in before]:
                logging.root.removeHandler(handler)
                handler.close()
            logging.root.setLevel(old_level)


def test_fetch_entries_once_uses_configured_server(make_entry):
    config = UserConfig(api_base_url="http://queue.test", request_timeout_seconds=9)

    async def _fake_fetch(**kwargs):
        assert kwargs == {"client": None, "base_url": "http://queue.test", "timeout_seconds": 9}
        return [make_entry("v5")]

    with patch("unwatched_browser.cli.fetch_unwatched", side_effect=_fake_fetch):
        entries = _fetch_entries_once(config)

    assert [entry.video_id for entry in entries] == ["v5"]
