# CCJK Config Watch Backends
# Low-level change notification: native file-system events (watchdog) or polling

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Callable, Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ccjk_config.errors import WatcherError
from ccjk_config.logger import create_logger
from ccjk_config.utils.hashing import fingerprint

log = create_logger("watcher")

ChangeCallback = Callable[[Path], None]
ErrorCallback = Callable[[BaseException], None]

# Events that can change file content; "opened"/"closed" are ignored
CONTENT_EVENTS = ("created", "modified", "moved", "deleted")


class Watcher(Protocol):
    """
    Capability interface for raw change notifications.

    ``start`` watches a file (or, when given a directory, every file
    directly inside it) and calls ``on_change`` with the affected path.
    ``on_error`` is called if the watch breaks. ``stop`` must be safe to call
    more than once.
    """

    def start(self, path: Path, on_change: ChangeCallback, on_error: ErrorCallback) -> None: ...

    def stop(self) -> None: ...


class _ForwardingHandler(FileSystemEventHandler):
    def __init__(self, target_name: str | None, on_change: ChangeCallback):
        self.target_name = target_name
        self.on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in CONTENT_EVENTS:
            return
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            if not raw:
                continue
            changed = Path(os.fsdecode(raw))
            if self.target_name is None or changed.name == self.target_name:
                self.on_change(changed)
                return


class WatchdogBackend:
    """Native file-system events via watchdog's platform observer."""

    def __init__(self) -> None:
        self._observer: Observer | None = None

    def start(self, path: Path, on_change: ChangeCallback, on_error: ErrorCallback) -> None:
        """
        Raises:
            WatcherError: If the observer cannot be scheduled.
        """
        self.stop()
        path = Path(path)
        if path.is_dir():
            directory, target = path, None
        else:
            directory, target = path.parent, path.name
        observer = Observer()
        try:
            observer.schedule(_ForwardingHandler(target, on_change), str(directory), recursive=False)
            observer.start()
        except OSError as e:
            raise WatcherError(f"Cannot watch {directory}: {e}") from e
        self._observer = observer
        log.debug("Watching {} with native events", path)

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        if observer is not threading.current_thread():
            observer.join(timeout=2)


class PollingBackend:
    """
    Polls a file's mtime, size and content hash on a background thread.

    For a directory, polls the names and mtimes of its direct entries.
    """

    def __init__(self, interval: float = 0.5):
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _signature(self, path: Path) -> object:
        if path.is_dir():
            entries = []
            for entry in os.scandir(path):
                try:
                    entries.append((entry.name, entry.stat().st_mtime_ns))
                except FileNotFoundError:
                    # Temp files of atomic writes can vanish mid-scan
                    continue
            return tuple(sorted(entries))
        return fingerprint(path)

    def start(self, path: Path, on_change: ChangeCallback, on_error: ErrorCallback) -> None:
        self.stop()
        path = Path(path)
        stop = threading.Event()
        self._stop = stop
        last = self._signature(path)

        def poll() -> None:
            nonlocal last
            while not stop.wait(self.interval):
                try:
                    current = self._signature(path)
                except OSError as e:
                    on_error(WatcherError(f"Polling {path} failed: {e}"))
                    return
                if current != last:
                    last = current
                    on_change(path)

        self._thread = threading.Thread(target=poll, name=f"ccjk-poll-{path.name}", daemon=True)
        self._thread.start()
        log.debug("Polling {} every {}s", path, self.interval)

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval * 2, 1.0))


class AutoBackend:
    """Native events, falling back to polling when the observer cannot start."""

    def __init__(self, poll_interval: float = 0.5):
        self.native = WatchdogBackend()
        self.polling = PollingBackend(poll_interval)
        self._active: Watcher | None = None

    def start(self, path: Path, on_change: ChangeCallback, on_error: ErrorCallback) -> None:
        self.stop()
        try:
            self.native.start(path, on_change, on_error)
            self._active = self.native
        except WatcherError as e:
            log.warning("Native watch unavailable ({}), falling back to polling", e)
            self.polling.start(path, on_change, on_error)
            self._active = self.polling

    def stop(self) -> None:
        active, self._active = self._active, None
        if active is not None:
            active.stop()


def create_backend(kind: str = "auto", *, poll_interval: float = 0.5) -> Watcher:
    """
    Build a backend by name: ``native`` (watchdog), ``polling`` or ``auto``.
    """
    if kind == "polling":
        return PollingBackend(poll_interval)
    if kind == "native":
        return WatchdogBackend()
    if kind == "auto":
        return AutoBackend(poll_interval)
    raise ValueError(f"Unknown watch backend: {kind}")
