# CCJK Config Watcher Module
# Hot-reload of configuration files with pluggable notification backends

from ccjk_config.watcher.backends import AutoBackend, PollingBackend, Watcher, WatchdogBackend, create_backend
from ccjk_config.watcher.diff import ChangeSource, ConfigChangeEvent, compute_changes
from ccjk_config.watcher.hot_reload import HotReloadWatcher, WatcherState, WatchMode

__all__ = [
    # Backends
    "AutoBackend",
    "PollingBackend",
    "Watcher",
    "WatchdogBackend",
    "create_backend",
    # Events
    "ChangeSource",
    "ConfigChangeEvent",
    "compute_changes",
    # Hot reload
    "HotReloadWatcher",
    "WatchMode",
    "WatcherState",
]
