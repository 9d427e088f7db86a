# CCJK Config Context
# Explicit wiring of paths, store, clock, scope managers and migration engine

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ccjk_config.migration.engine import MigrationEngine
from ccjk_config.migration.legacy import legacy_paths
from ccjk_config.scopes.base import ConfigScope, ScopeManager
from ccjk_config.scopes.native_settings import NativeSettingsManager
from ccjk_config.scopes.preferences import PreferencesManager
from ccjk_config.scopes.runtime_state import RuntimeStateManager
from ccjk_config.settings import PlatformSettings
from ccjk_config.store import AtomicFileStore
from ccjk_config.utils.clock import Clock, utc_now
from ccjk_config.watcher.backends import Watcher, create_backend

PREFERENCES_FILE = "config.yaml"
NATIVE_SETTINGS_FILE = "settings.json"
RUNTIME_STATE_FILE = "state.json"
BACKUP_DIR = "backups"


@dataclass
class ConfigContext:
    """
    Everything the platform needs, built once and passed explicitly.

    Use :meth:`from_settings` in applications and :meth:`for_directory` in
    tests to keep every file under one temporary root.
    """

    settings: PlatformSettings
    store: AtomicFileStore = field(default_factory=AtomicFileStore)
    clock: Clock = utc_now
    managers: dict[ConfigScope, ScopeManager] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.managers:
            self.managers = {
                ConfigScope.PREFERENCES: PreferencesManager(self.preferences_path, self.store, clock=self.clock),
                ConfigScope.NATIVE_SETTINGS: NativeSettingsManager(
                    self.native_settings_path, self.store, clock=self.clock
                ),
                ConfigScope.RUNTIME_STATE: RuntimeStateManager(self.runtime_state_path, self.store, clock=self.clock),
            }

    @classmethod
    def from_settings(cls, settings: PlatformSettings | None = None, *, clock: Clock | None = None) -> ConfigContext:
        """Build a context from ``CCJK_*`` environment settings."""
        return cls(settings=settings or PlatformSettings(), clock=clock or utc_now)

    @classmethod
    def for_directory(cls, root: Path, *, clock: Clock | None = None, **overrides) -> ConfigContext:
        """
        Build a context rooted at ``root``.

        The user home is ``root`` itself, so ``.ccjk``, ``.claude`` and every
        legacy search location live underneath it.
        """
        settings = PlatformSettings(user_home=Path(root), **overrides)
        return cls(settings=settings, clock=clock or utc_now)

    @property
    def config_dir(self) -> Path:
        return self.settings.config_dir

    @property
    def claude_dir(self) -> Path:
        return self.settings.claude_config_dir

    @property
    def preferences_path(self) -> Path:
        return self.config_dir / PREFERENCES_FILE

    @property
    def native_settings_path(self) -> Path:
        return self.claude_dir / NATIVE_SETTINGS_FILE

    @property
    def runtime_state_path(self) -> Path:
        return self.config_dir / RUNTIME_STATE_FILE

    @property
    def backup_root(self) -> Path:
        return self.config_dir / BACKUP_DIR

    @property
    def debounce(self) -> float:
        return self.settings.watch_debounce_ms / 1000

    @property
    def restart_backoff(self) -> float:
        return self.settings.watch_restart_backoff_ms / 1000

    def legacy_paths(self) -> list[Path]:
        return legacy_paths(self.config_dir, self.claude_dir, self.settings.user_home)

    def manager(self, scope: ConfigScope | str) -> ScopeManager:
        """
        Raises:
            ValueError: For ``all`` or an unknown scope name.
        """
        scope = ConfigScope(scope)
        if scope not in self.managers:
            raise ValueError(f"No single manager for scope '{scope.value}'")
        return self.managers[scope]

    def migration_engine(self) -> MigrationEngine:
        return MigrationEngine(
            self.managers,
            self.legacy_paths(),
            self.backup_root,
            store=self.store,
            clock=self.clock,
        )

    def watch_backend(self) -> Watcher:
        return create_backend(self.settings.watch_backend, poll_interval=self.settings.poll_interval_ms / 1000)
