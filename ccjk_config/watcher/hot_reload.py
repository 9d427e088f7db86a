# CCJK Config Hot-Reload Watcher
# Debounced reload, validation gate and leaf-level change fan-out for one config file

from __future__ import annotations

import copy
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from ccjk_config.errors import ConfigError
from ccjk_config.logger import create_logger
from ccjk_config.schema.validator import SchemaValidator
from ccjk_config.utils.paths import ensure_dir
from ccjk_config.watcher.backends import Watcher, create_backend
from ccjk_config.watcher.diff import ChangeSource, ConfigChangeEvent, compute_changes

log = create_logger("watcher")

ChangeHandler = Callable[[ConfigChangeEvent], None]
Loader = Callable[[], "dict[str, Any] | None"]


class WatcherState(str, Enum):
    STOPPED = "stopped"
    WATCHING = "watching"
    DEBOUNCING = "debouncing"


class WatchMode(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class HotReloadWatcher:
    """
    Watches one configuration file and notifies subscribers of leaf changes.

    Raw notifications from the backend re-arm a debounce timer; when it
    fires the file is re-loaded, optionally validated, diffed against the
    last known snapshot and every subscriber gets one event per changed
    path. Invalid or unparseable content is suppressed and the last good
    snapshot kept. Backend failures restart the watch after a backoff.

    Example:
        >>> watcher = HotReloadWatcher(path, manager.read, validator=manager.validator)
        >>> unsubscribe = watcher.subscribe(print)
        >>> watcher.start()
    """

    def __init__(
        self,
        path: Path,
        loader: Loader,
        *,
        validator: SchemaValidator | None = None,
        debounce: float = 0.3,
        backend: Watcher | None = None,
        restart_backoff: float = 1.0,
    ):
        """
        Initialize watcher.

        Args:
            path: File to watch.
            loader: Returns the parsed document, None if the file is missing,
                or raises ConfigError if it cannot be parsed.
            validator: Optional gate; invalid documents produce no events.
            debounce: Seconds to wait for a burst of notifications to settle.
            backend: Raw notification source (default: native with polling fallback).
            restart_backoff: Seconds before restarting a failed backend.
        """
        self.path = Path(path)
        self.loader = loader
        self.validator = validator
        self.debounce = debounce
        self.backend = backend or create_backend("auto")
        self.restart_backoff = restart_backoff

        self._lock = threading.RLock()
        self._state = WatcherState.STOPPED
        self._mode = WatchMode.FILE
        self._snapshot: dict[str, Any] = {}
        self._handlers: list[ChangeHandler] = []
        self._timer: threading.Timer | None = None
        self._restart_timer: threading.Timer | None = None
        # Bumped on every re-arm and on stop(); stale timers compare and bail out
        self._token = 0
        self._running = 0

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def mode(self) -> WatchMode:
        return self._mode

    @property
    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._snapshot)

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """
        Register a change handler.

        Returns:
            A function that removes the handler; calling it twice is harmless.
        """
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def start(self) -> None:
        """Load the initial snapshot synchronously, then begin watching."""
        with self._lock:
            if self._state != WatcherState.STOPPED:
                return
            try:
                self._snapshot = self.loader() or {}
            except ConfigError as e:
                log.warning("Starting {} with an empty snapshot: {}", self.path, e)
                self._snapshot = {}
            self._running += 1
            self._state = WatcherState.WATCHING
        self._start_backend()

    def stop(self) -> None:
        """Cancel pending timers and release the backend. No event fires afterwards."""
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return
            self._state = WatcherState.STOPPED
            self._token += 1
            self._running += 1
            for timer in (self._timer, self._restart_timer):
                if timer is not None:
                    timer.cancel()
            self._timer = None
            self._restart_timer = None
        self.backend.stop()
        log.debug("Stopped watching {}", self.path)

    def publish(self, events: list[ConfigChangeEvent], snapshot: dict[str, Any] | None = None) -> None:
        """
        Deliver externally computed events (e.g. API writes) to subscribers.

        When ``snapshot`` is given it becomes the new baseline, so the file
        notification caused by the same write produces no duplicate events.
        """
        with self._lock:
            if snapshot is not None:
                self._snapshot = copy.deepcopy(snapshot)
            run = self._running
        self._dispatch(events, run)

    def _start_backend(self) -> None:
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return
            if self.path.exists():
                self._mode = WatchMode.FILE
                target = self.path
            else:
                self._mode = WatchMode.DIRECTORY
                target = ensure_dir(self.path.parent)
        try:
            self.backend.start(target, self._on_raw_change, self._on_backend_error)
        except (ConfigError, OSError) as e:
            self._on_backend_error(e)
            return
        log.debug("Watching {} ({} mode)", target, self._mode.value)

    def _on_raw_change(self, changed: Path) -> None:
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._token += 1
            timer = threading.Timer(self.debounce, self._fire, args=(self._token,))
            timer.daemon = True
            self._timer = timer
            self._state = WatcherState.DEBOUNCING
        timer.start()

    def _fire(self, token: int) -> None:
        with self._lock:
            if token != self._token or self._state == WatcherState.STOPPED:
                return
            self._timer = None
            self._state = WatcherState.WATCHING
            switch_to_file = self._mode == WatchMode.DIRECTORY and self.path.exists()
            run = self._running

        if switch_to_file:
            log.debug("{} appeared, switching to file-level watch", self.path)
            self.backend.stop()
            self._start_backend()

        try:
            loaded = self.loader()
        except ConfigError as e:
            log.warning("Ignoring unreadable change to {}: {}", self.path, e)
            return

        # None means the file was deleted; an empty or blank file still goes through the gate
        if self.validator is not None and loaded is not None:
            result = self.validator.validate(loaded)
            if not result.valid:
                log.warning(
                    "Ignoring invalid change to {} ({} errors, first: {})",
                    self.path,
                    len(result.errors),
                    result.errors[0].message,
                )
                return
        doc = loaded or {}

        with self._lock:
            if token != self._token or run != self._running:
                return
            previous, self._snapshot = self._snapshot, copy.deepcopy(doc)

        events = compute_changes(previous, doc, ChangeSource.FILE)
        if events:
            log.debug("{} changed: {} paths", self.path, len(events))
        self._dispatch(events, run)

    def _dispatch(self, events: list[ConfigChangeEvent], run: int) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for event in events:
            for handler in handlers:
                if self._running != run or self._state == WatcherState.STOPPED:
                    return
                try:
                    handler(event)
                except Exception:
                    log.exception("Change handler {} failed for {}", getattr(handler, "__name__", handler), event.path)

    def _on_backend_error(self, error: BaseException) -> None:
        log.error("Watch backend failed for {}: {}", self.path, error)
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return
            run = self._running
            timer = threading.Timer(self.restart_backoff, self._restart, args=(run,))
            timer.daemon = True
            self._restart_timer = timer
        timer.start()

    def _restart(self, run: int) -> None:
        with self._lock:
            if run != self._running or self._state == WatcherState.STOPPED:
                return
            self._restart_timer = None
        log.info("Restarting watch on {}", self.path)
        self.backend.stop()
        self._start_backend()
