"""CoreState owns credentials, config, the monitor and the last snapshots.

All calls here are synchronous.  ``fetch_usage`` and ``read_context`` block
on network / disk, so hosts should keep them off any thread that must stay
responsive.  The only state touched from another thread is the ChangeFlag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from claude_status.config import settings
from claude_status.core.thresholds import Severity, classify, color_for
from claude_status.credentials.store import Credentials, load_credentials
from claude_status.monitor.watcher import ChangeFlag, FileChangeMonitor
from claude_status.transcript.parser import ContextInfo, TranscriptAggregator
from claude_status.usage_api.client import UsageClient
from claude_status.usage_api.models import UsageData

logger = logging.getLogger(__name__)


class NoCredentialsError(Exception):
    """Raised when a fetch is attempted before credentials are loaded."""

    def __init__(self) -> None:
        super().__init__("No credentials loaded")


@dataclass
class Config:
    """Tunables the host can change at runtime."""

    update_interval: int = field(default_factory=lambda: settings.update_interval)
    yellow_threshold: int = field(default_factory=lambda: settings.yellow_threshold)
    orange_threshold: int = field(default_factory=lambda: settings.orange_threshold)
    red_threshold: int = field(default_factory=lambda: settings.red_threshold)

    def is_ascending(self) -> bool:
        return self.yellow_threshold <= self.orange_threshold <= self.red_threshold


class CoreState:
    """State aggregation behind the status indicator."""

    def __init__(
        self,
        config: Config | None = None,
        usage_client: UsageClient | None = None,
        aggregator: TranscriptAggregator | None = None,
    ) -> None:
        self.config = config or Config()
        self._usage_client = usage_client or UsageClient()
        self._aggregator = aggregator or TranscriptAggregator()
        self._credentials: Credentials | None = None
        self._monitor: FileChangeMonitor | None = None
        self._last_usage: UsageData | None = None
        self._last_context: ContextInfo | None = None
        self._creds_changed = ChangeFlag()

    def __enter__(self) -> CoreState:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- snapshots -------------------------------------------------------------

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def last_usage(self) -> UsageData | None:
        return self._last_usage

    @property
    def last_context(self) -> ContextInfo | None:
        return self._last_context

    @property
    def monitoring(self) -> bool:
        return self._monitor is not None

    # -- credentials -----------------------------------------------------------

    def load_credentials(self, path: str | None = None) -> Credentials:
        """Load credentials, replacing any held ones; cleared on failure."""
        try:
            creds = load_credentials(path)
        except Exception:
            self._credentials = None
            raise
        self._credentials = creds
        return creds

    # -- blocking fetches ------------------------------------------------------

    def fetch_usage(self) -> UsageData:
        """Fetch usage with the stored token; the cached snapshot is cleared on failure."""
        if self._credentials is None:
            raise NoCredentialsError()
        try:
            usage = self._usage_client.fetch(self._credentials.access_token)
        except Exception:
            self._last_usage = None
            raise
        self._last_usage = usage
        return usage

    def read_context(self) -> ContextInfo:
        try:
            info = self._aggregator.read_latest()
        except Exception:
            self._last_context = None
            raise
        self._last_context = info
        return info

    # -- monitor ---------------------------------------------------------------

    def start_monitor(self, path: str | None = None) -> None:
        """Watch ``path`` for changes, replacing any existing watch."""
        self.stop_monitor()
        self._monitor = FileChangeMonitor.start(path, self._creds_changed)

    def stop_monitor(self) -> None:
        monitor, self._monitor = self._monitor, None
        if monitor is not None:
            monitor.stop()

    def poll_credentials_changed(self) -> bool:
        """True once per batch of file changes since the previous poll."""
        return self._creds_changed.poll_and_clear()

    def close(self) -> None:
        self.stop_monitor()

    # -- config ----------------------------------------------------------------

    def set_update_interval(self, seconds: int) -> None:
        self.config.update_interval = seconds

    def set_yellow_threshold(self, pct: int) -> None:
        self.config.yellow_threshold = pct
        self._check_thresholds()

    def set_orange_threshold(self, pct: int) -> None:
        self.config.orange_threshold = pct
        self._check_thresholds()

    def set_red_threshold(self, pct: int) -> None:
        self.config.red_threshold = pct
        self._check_thresholds()

    def _check_thresholds(self) -> None:
        # Ordering is advisory: warn, keep the values.
        if not self.config.is_ascending():
            logger.warning(
                "Thresholds are not ascending (yellow=%s orange=%s red=%s)",
                self.config.yellow_threshold,
                self.config.orange_threshold,
                self.config.red_threshold,
            )

    # -- classification --------------------------------------------------------

    def classify(self, pct: float) -> Severity:
        return classify(
            pct,
            self.config.yellow_threshold,
            self.config.orange_threshold,
            self.config.red_threshold,
        )

    def color_for(self, pct: float) -> str:
        """Hex color for ``pct`` under the current thresholds."""
        return color_for(self.classify(pct))
