from claude_status.monitor.watcher import (
    ChangeFlag,
    FileChangeMonitor,
    MonitorError,
    WatcherError,
    WatchPathError,
    poll_and_clear,
)

__all__ = [
    "ChangeFlag",
    "FileChangeMonitor",
    "MonitorError",
    "WatcherError",
    "WatchPathError",
    "poll_and_clear",
]
