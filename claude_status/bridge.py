"""Handle-based surface for host UIs.

Hosts hold an integer handle instead of a CoreState reference, call the
functions below, and get back result codes and immutable snapshot records.
Nothing here raises for core failures: each error kind maps to a
ResultCode, and every returned string is an ordinary ``str`` the host owns.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from enum import IntEnum

from claude_status.core.state import CoreState, NoCredentialsError
from claude_status.core.thresholds import SEVERITY_COLORS, Severity
from claude_status.credentials.store import CredentialsError, CredentialsIOError
from claude_status.monitor.watcher import MonitorError
from claude_status.transcript.parser import NoTranscriptsError, TranscriptError
from claude_status.usage_api.client import AuthError, NetworkError, ParseError

logger = logging.getLogger(__name__)


class ResultCode(IntEnum):
    OK = 0
    NO_CREDENTIALS = 1
    INVALID_CREDENTIALS = 2
    NETWORK_ERROR = 3
    PARSE_ERROR = 4
    AUTH_ERROR = 5
    NO_TRANSCRIPTS = 6
    MONITOR_ERROR = 7
    INVALID_HANDLE = 8


@dataclass(frozen=True)
class UsageSnapshot:
    five_hour_pct: float = 0.0
    seven_day_pct: float = 0.0
    five_hour_reset_ts: int = 0  # unix seconds
    seven_day_reset_ts: int = 0
    valid: bool = False


@dataclass(frozen=True)
class ContextSnapshot:
    context_pct: float = 0.0
    context_tokens: int = 0
    context_window_size: int = 0
    model_name: str | None = None
    valid: bool = False


@dataclass(frozen=True)
class CredentialsSnapshot:
    plan_name: str | None = None
    valid: bool = False


# handle -> CoreState
_instances: dict[int, CoreState] = {}
_next_handle = itertools.count(1)
_lock = threading.Lock()


def _get(handle: int) -> CoreState | None:
    with _lock:
        return _instances.get(handle)


# ── Lifecycle ────────────────────────────────────────────────────────────────


def core_new() -> int:
    """Create a CoreState and return its handle."""
    state = CoreState()
    with _lock:
        handle = next(_next_handle)
        _instances[handle] = state
    return handle


def core_free(handle: int) -> None:
    """Stop the instance's monitor and drop it. Unknown handles are ignored."""
    with _lock:
        state = _instances.pop(handle, None)
    if state is not None:
        state.close()


# ── Operations ───────────────────────────────────────────────────────────────


def load_credentials(handle: int, path: str | None = None) -> ResultCode:
    state = _get(handle)
    if state is None:
        return ResultCode.INVALID_HANDLE
    try:
        state.load_credentials(path)
    except CredentialsIOError as e:
        logger.info("Credentials unavailable: %s", e)
        return ResultCode.NO_CREDENTIALS
    except CredentialsError as e:
        logger.warning("Credentials invalid: %s", e)
        return ResultCode.INVALID_CREDENTIALS
    return ResultCode.OK


def fetch_usage(handle: int) -> ResultCode:
    """Blocking usage fetch."""
    state = _get(handle)
    if state is None:
        return ResultCode.INVALID_HANDLE
    try:
        state.fetch_usage()
    except NoCredentialsError:
        return ResultCode.NO_CREDENTIALS
    except AuthError:
        return ResultCode.AUTH_ERROR
    except NetworkError as e:
        logger.warning("%s", e)
        return ResultCode.NETWORK_ERROR
    except ParseError as e:
        logger.warning("%s", e)
        return ResultCode.PARSE_ERROR
    return ResultCode.OK


def read_context(handle: int) -> ResultCode:
    state = _get(handle)
    if state is None:
        return ResultCode.INVALID_HANDLE
    try:
        state.read_context()
    except NoTranscriptsError:
        return ResultCode.NO_TRANSCRIPTS
    except TranscriptError as e:
        logger.warning("%s", e)
        return ResultCode.PARSE_ERROR
    return ResultCode.OK


def start_monitor(handle: int, path: str | None = None) -> ResultCode:
    state = _get(handle)
    if state is None:
        return ResultCode.INVALID_HANDLE
    try:
        state.start_monitor(path)
    except MonitorError as e:
        logger.warning("%s", e)
        return ResultCode.MONITOR_ERROR
    return ResultCode.OK


def stop_monitor(handle: int) -> None:
    state = _get(handle)
    if state is not None:
        state.stop_monitor()


def credentials_changed(handle: int) -> bool:
    """Read-and-clear the changed flag. False for unknown handles."""
    state = _get(handle)
    if state is None:
        return False
    return state.poll_credentials_changed()


# ── Config ───────────────────────────────────────────────────────────────────


def set_update_interval(handle: int, seconds: int) -> None:
    state = _get(handle)
    if state is not None:
        state.set_update_interval(seconds)


def set_yellow_threshold(handle: int, pct: int) -> None:
    state = _get(handle)
    if state is not None:
        state.set_yellow_threshold(pct)


def set_orange_threshold(handle: int, pct: int) -> None:
    state = _get(handle)
    if state is not None:
        state.set_orange_threshold(pct)


def set_red_threshold(handle: int, pct: int) -> None:
    state = _get(handle)
    if state is not None:
        state.set_red_threshold(pct)


def get_color(handle: int, pct: float) -> str:
    """Hex color for ``pct``; green when the handle is unknown."""
    state = _get(handle)
    if state is None:
        return SEVERITY_COLORS[Severity.GREEN]
    return state.color_for(pct)


# ── Snapshots ────────────────────────────────────────────────────────────────


def get_usage(handle: int) -> UsageSnapshot:
    state = _get(handle)
    usage = state.last_usage if state is not None else None
    if usage is None:
        return UsageSnapshot()
    return UsageSnapshot(
        five_hour_pct=usage.five_hour.utilization,
        seven_day_pct=usage.seven_day.utilization,
        five_hour_reset_ts=int(usage.five_hour.resets_at.timestamp()),
        seven_day_reset_ts=int(usage.seven_day.resets_at.timestamp()),
        valid=True,
    )


def get_context(handle: int) -> ContextSnapshot:
    state = _get(handle)
    info = state.last_context if state is not None else None
    if info is None:
        return ContextSnapshot()
    return ContextSnapshot(
        context_pct=info.context_pct,
        context_tokens=info.context_tokens,
        context_window_size=info.context_window_size,
        model_name=info.model_name,
        valid=True,
    )


def get_credentials_info(handle: int) -> CredentialsSnapshot:
    state = _get(handle)
    creds = state.credentials if state is not None else None
    if creds is None:
        return CredentialsSnapshot()
    return CredentialsSnapshot(plan_name=creds.plan_name, valid=True)
