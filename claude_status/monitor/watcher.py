"""Watch the credentials file and raise a pollable "changed" flag.

Threads involved while a monitor is running:

* the watchdog observer thread, which receives OS notifications and only
  forwards raw events into a queue;
* one worker thread owned by the monitor, which drains the queue and sets
  the shared ChangeFlag for create / modify events on the watched file,
  including a rename that lands on it.

The flag is a level, not a counter: any number of qualifying events before
the next poll reads as a single ``True``.
"""

from __future__ import annotations

import errno
import logging
import os
import queue
import threading
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from claude_status.credentials.store import resolve_credentials_path

logger = logging.getLogger(__name__)

_QUALIFYING_EVENTS = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED})
_PATH_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR, errno.EACCES, errno.EPERM})


class MonitorError(Exception):
    """Base class for monitor failures."""


class WatcherError(MonitorError):
    """Raised when the OS watch cannot be created."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to create file watcher: {detail}")


class WatchPathError(MonitorError):
    """Raised when the target path cannot be watched."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to watch path {path}: {detail}")


class ChangeFlag:
    """Thread-safe boolean latch with read-and-clear."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = False

    def set(self) -> None:
        with self._lock:
            self._value = True

    def poll_and_clear(self) -> bool:
        """Return the current value and reset it to False."""
        with self._lock:
            value = self._value
            self._value = False
        return value


def poll_and_clear(flag: ChangeFlag) -> bool:
    return flag.poll_and_clear()


class _ForwardingHandler(FileSystemEventHandler):
    """Runs on the observer thread; hands every event to the worker queue."""

    def __init__(self, events: queue.Queue[FileSystemEvent | None]) -> None:
        super().__init__()
        self._events = events

    def dispatch(self, event: FileSystemEvent) -> None:
        self._events.put(event)


class FileChangeMonitor:
    """One active watch on one file, feeding a shared ChangeFlag.

    Use :meth:`start` to build a running monitor and :meth:`stop` to tear it
    down.  After ``stop`` returns no further event can touch the flag.
    """

    def __init__(self, path: Path, flag: ChangeFlag) -> None:
        self.path = path
        self.flag = flag
        self._events: queue.Queue[FileSystemEvent | None] = queue.Queue()
        self._handler = _ForwardingHandler(self._events)
        self._observer: Observer | None = None
        self._worker: threading.Thread | None = None
        self._stop_lock = threading.Lock()
        self._stopped = False

    # -- lifecycle -------------------------------------------------------------

    @classmethod
    def start(cls, path: str | None, flag: ChangeFlag) -> FileChangeMonitor:
        """Watch ``path`` (default: the credentials file) and return the monitor.

        Raises:
            WatchPathError: the path does not exist or cannot be watched.
            WatcherError: the OS notification facility is unavailable.
        """
        watch_path = Path(os.path.abspath(resolve_credentials_path(path)))
        if not watch_path.exists():
            raise WatchPathError(watch_path, "no such file or directory")

        monitor = cls(watch_path, flag)
        monitor._start()
        return monitor

    def _start(self) -> None:
        # The containing directory is watched; the worker drops events for
        # any other entry.
        watch_dir = self.path if self.path.is_dir() else self.path.parent

        observer = Observer()
        try:
            observer.schedule(self._handler, str(watch_dir), recursive=False)
            observer.start()
        except OSError as e:
            if e.errno in _PATH_ERRNOS:
                raise WatchPathError(self.path, str(e)) from e
            raise WatcherError(str(e)) from e
        self._observer = observer

        self._worker = threading.Thread(
            target=self._run,
            name="credentials-monitor",
            daemon=True,
        )
        self._worker.start()
        logger.info("Watching %s for changes", self.path)

    def stop(self) -> None:
        """Release the OS watch and join the worker. Safe to call twice."""
        with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True

        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
        # Observer is gone, so nothing else will enqueue; close the channel.
        self._events.put(None)
        if self._worker is not None:
            self._worker.join()
        logger.info("Stopped watching %s", self.path)

    @property
    def running(self) -> bool:
        return not self._stopped and self._worker is not None and self._worker.is_alive()

    # -- worker ----------------------------------------------------------------

    def _run(self) -> None:
        while True:
            event = self._events.get()
            try:
                if event is None:
                    break
                if self._is_qualifying(event):
                    self.flag.set()
                else:
                    logger.debug("Ignoring %s event for %s", event.event_type, event.src_path)
            finally:
                self._events.task_done()

    def _is_qualifying(self, event: FileSystemEvent) -> bool:
        # A rename onto the watched path (atomic replace) counts as a create.
        if event.event_type == EVENT_TYPE_MOVED:
            return self._is_watched(event.dest_path)
        if event.event_type not in _QUALIFYING_EVENTS:
            return False
        return self._is_watched(event.src_path)

    def _is_watched(self, raw_path: str | bytes) -> bool:
        if not raw_path:
            return False
        return os.path.normpath(os.path.abspath(os.fsdecode(raw_path))) == str(self.path)
