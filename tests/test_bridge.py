"""Tests for the handle-based host surface."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from claude_status import bridge
from claude_status.bridge import ContextSnapshot, CredentialsSnapshot, ResultCode, UsageSnapshot
from claude_status.transcript.parser import (
    ContextInfo,
    NoTranscriptsError,
    TranscriptAggregator,
    TranscriptReadError,
)
from claude_status.usage_api.client import AuthError, NetworkError, ParseError, UsageClient
from claude_status.usage_api.models import UsageData, UsagePeriod
from tests.conftest import write_credentials

RESET_5H = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
RESET_7D = datetime(2026, 3, 5, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def handle():
    h = bridge.core_new()
    yield h
    bridge.core_free(h)


def _state(handle: int):
    return bridge._instances[handle]


@pytest.fixture
def creds_path(tmp_path: Path) -> Path:
    return write_credentials(tmp_path / "c.json", {"accessToken": "tok", "subscriptionType": "pro"})


class TestLifecycle:
    def test_handles_are_distinct(self) -> None:
        a, b = bridge.core_new(), bridge.core_new()
        try:
            assert a != b
        finally:
            bridge.core_free(a)
            bridge.core_free(b)

    def test_free_then_use(self) -> None:
        h = bridge.core_new()
        bridge.core_free(h)
        assert bridge.fetch_usage(h) == ResultCode.INVALID_HANDLE
        assert bridge.get_usage(h) == UsageSnapshot()
        bridge.core_free(h)  # double free is harmless

    def test_unknown_handle(self) -> None:
        assert bridge.load_credentials(-1) == ResultCode.INVALID_HANDLE
        assert bridge.credentials_changed(-1) is False
        assert bridge.get_color(-1, 99.0) == "#5faf5f"


class TestSnapshotsBeforeFetch:
    def test_all_invalid(self, handle: int) -> None:
        assert bridge.get_usage(handle).valid is False
        assert bridge.get_context(handle) == ContextSnapshot()
        assert bridge.get_credentials_info(handle) == CredentialsSnapshot(plan_name=None, valid=False)


class TestCredentials:
    def test_ok(self, handle: int, creds_path: Path) -> None:
        assert bridge.load_credentials(handle, str(creds_path)) == ResultCode.OK
        assert bridge.get_credentials_info(handle) == CredentialsSnapshot(plan_name="Pro", valid=True)

    def test_missing_file(self, handle: int, tmp_path: Path) -> None:
        assert bridge.load_credentials(handle, str(tmp_path / "none.json")) == ResultCode.NO_CREDENTIALS

    def test_invalid(self, handle: int, tmp_path: Path) -> None:
        p = write_credentials(tmp_path / "c.json", None)
        assert bridge.load_credentials(handle, str(p)) == ResultCode.INVALID_CREDENTIALS
        assert bridge.get_credentials_info(handle).valid is False


class TestFetchUsage:
    def test_no_credentials(self, handle: int) -> None:
        assert bridge.fetch_usage(handle) == ResultCode.NO_CREDENTIALS

    @pytest.mark.parametrize(
        "error, code",
        [
            (AuthError(), ResultCode.AUTH_ERROR),
            (NetworkError("refused"), ResultCode.NETWORK_ERROR),
            (ParseError("bad"), ResultCode.PARSE_ERROR),
        ],
    )
    def test_error_codes(self, handle: int, creds_path: Path, error: Exception, code: ResultCode) -> None:
        bridge.load_credentials(handle, str(creds_path))
        _state(handle)._usage_client = MagicMock(fetch=MagicMock(side_effect=error))
        assert bridge.fetch_usage(handle) == code
        assert bridge.get_usage(handle).valid is False

    def test_snapshot(self, handle: int, creds_path: Path) -> None:
        usage = UsageData(
            five_hour=UsagePeriod(utilization=12.5, resets_at=RESET_5H),
            seven_day=UsagePeriod(utilization=80.0, resets_at=RESET_7D),
        )
        bridge.load_credentials(handle, str(creds_path))
        _state(handle)._usage_client = MagicMock(fetch=MagicMock(return_value=usage))

        assert bridge.fetch_usage(handle) == ResultCode.OK
        assert bridge.get_usage(handle) == UsageSnapshot(
            five_hour_pct=12.5,
            seven_day_pct=80.0,
            five_hour_reset_ts=int(RESET_5H.timestamp()),
            seven_day_reset_ts=int(RESET_7D.timestamp()),
            valid=True,
        )

    def test_non_ascii_token_is_network_error(self, handle: int, tmp_path: Path) -> None:
        p = write_credentials(tmp_path / "c.json", {"accessToken": "tok\u00e9n"})
        assert bridge.load_credentials(handle, str(p)) == ResultCode.OK
        _state(handle)._usage_client = UsageClient(
            url="https://api.example.test/usage",
            transport=httpx.MockTransport(lambda req: httpx.Response(500)),
        )
        assert bridge.fetch_usage(handle) == ResultCode.NETWORK_ERROR
        assert bridge.get_usage(handle).valid is False


class TestReadContext:
    def test_snapshot(self, handle: int) -> None:
        info = ContextInfo(context_pct=50.0, context_tokens=100_000, model_name="claude-opus-4-6")
        _state(handle)._aggregator = MagicMock(read_latest=MagicMock(return_value=info))

        assert bridge.read_context(handle) == ResultCode.OK
        snap = bridge.get_context(handle)
        assert snap.valid is True
        assert snap.model_name == "claude-opus-4-6"
        assert snap.context_window_size == 200_000

    def test_returned_strings_are_independent(self, handle: int) -> None:
        info = ContextInfo(context_pct=1.0, context_tokens=2000, model_name="first")
        agg = MagicMock(read_latest=MagicMock(return_value=info))
        _state(handle)._aggregator = agg
        bridge.read_context(handle)
        first = bridge.get_context(handle)

        agg.read_latest.return_value = ContextInfo(context_pct=2.0, context_tokens=4000, model_name="second")
        bridge.read_context(handle)

        assert first.model_name == "first"
        assert bridge.get_context(handle).model_name == "second"

    def test_no_transcripts(self, handle: int, tmp_path: Path) -> None:
        _state(handle)._aggregator = MagicMock(read_latest=MagicMock(side_effect=NoTranscriptsError(tmp_path)))
        assert bridge.read_context(handle) == ResultCode.NO_TRANSCRIPTS

    def test_read_error(self, handle: int, tmp_path: Path) -> None:
        _state(handle)._aggregator = MagicMock(
            read_latest=MagicMock(side_effect=TranscriptReadError(tmp_path, "denied"))
        )
        assert bridge.read_context(handle) == ResultCode.PARSE_ERROR
        assert bridge.get_context(handle).valid is False

    def test_unreadable_claude_dir(self, handle: int, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        projects = tmp_path / ".claude" / "projects"
        projects.mkdir(parents=True)
        real_stat = Path.stat

        def denied(self: Path, *args, **kwargs):
            if self == projects:
                raise PermissionError(13, "Permission denied", str(self))
            return real_stat(self, *args, **kwargs)

        _state(handle)._aggregator = TranscriptAggregator(tmp_path / ".claude")
        monkeypatch.setattr(Path, "stat", denied)
        assert bridge.read_context(handle) == ResultCode.PARSE_ERROR


class TestMonitorAndConfig:
    def test_monitor_lifecycle(self, handle: int, creds_path: Path) -> None:
        assert bridge.start_monitor(handle, str(creds_path)) == ResultCode.OK
        assert _state(handle).monitoring
        bridge.stop_monitor(handle)
        assert not _state(handle).monitoring

    def test_monitor_error(self, handle: int, tmp_path: Path) -> None:
        assert bridge.start_monitor(handle, str(tmp_path / "missing")) == ResultCode.MONITOR_ERROR

    def test_free_stops_monitor(self, creds_path: Path) -> None:
        h = bridge.core_new()
        bridge.start_monitor(h, str(creds_path))
        monitor = _state(h)._monitor
        bridge.core_free(h)
        assert monitor is not None and monitor.running is False

    def test_setters_and_color(self, handle: int) -> None:
        bridge.set_yellow_threshold(handle, 10)
        bridge.set_orange_threshold(handle, 20)
        bridge.set_red_threshold(handle, 30)
        bridge.set_update_interval(handle, 5)
        assert _state(handle).config.update_interval == 5
        assert bridge.get_color(handle, 9.9) == "#5faf5f"
        assert bridge.get_color(handle, 10) == "#d7af5f"
        assert bridge.get_color(handle, 20) == "#d78700"
        assert bridge.get_color(handle, 30) == "#d75f5f"

    def test_credentials_changed(self, handle: int) -> None:
        _state(handle)._creds_changed.set()
        assert bridge.credentials_changed(handle) is True
        assert bridge.credentials_changed(handle) is False
