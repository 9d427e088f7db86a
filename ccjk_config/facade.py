# CCJK Config Unified Facade
# Single entry point over scope managers, merging, migration and hot-reload

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

from ccjk_config.collaborators import CatalogTranslator, CredentialStore, MemoryCredentialStore, Translator
from ccjk_config.context import ConfigContext
from ccjk_config.errors import ConfigParseError
from ccjk_config.logger import create_logger
from ccjk_config.merge.engine import MergeOptions, MergeResult, merge
from ccjk_config.merge.scopes import merge_native_settings, merge_preferences
from ccjk_config.migration.engine import MigrationOptions, MigrationStatus
from ccjk_config.migration.steps import MigrationResult
from ccjk_config.schema.validator import ValidationResult
from ccjk_config.scopes.base import ConfigScope, ResetResult, ScopeManager
from ccjk_config.scopes.native_settings import NativeSettingsManager
from ccjk_config.scopes.preferences import PreferencesManager
from ccjk_config.scopes.runtime_state import RuntimeStateManager
from ccjk_config.watcher.diff import ChangeSource, ConfigChangeEvent, compute_changes
from ccjk_config.watcher.hot_reload import HotReloadWatcher

log = create_logger("facade")

ChangeHandler = Callable[[ConfigChangeEvent], None]

_SCOPE_MERGES = {
    ConfigScope.PREFERENCES: merge_preferences,
    ConfigScope.NATIVE_SETTINGS: merge_native_settings,
    ConfigScope.RUNTIME_STATE: merge,
}


class UnifiedConfig:
    """
    High-level API used by the CLI and by embedding applications.

    Every operation takes a scope; ``ConfigScope.ALL`` fans out to each
    concrete scope where that makes sense. Writes made through this object
    are reported to ``watch`` subscribers as ``api`` events.

    Example:
        >>> config = UnifiedConfig(ConfigContext.from_settings())
        >>> config.get("preferences", "general.preferredLang")
        'en'
        >>> config.set("native-settings", "env.MCP_TIMEOUT", 60000)
    """

    def __init__(
        self,
        context: ConfigContext | None = None,
        *,
        credentials: CredentialStore | None = None,
        translator: Translator | None = None,
    ):
        self.context = context or ConfigContext.from_settings()
        self.credentials = credentials or MemoryCredentialStore()
        self.translator = translator or CatalogTranslator()
        self._watchers: dict[ConfigScope, HotReloadWatcher] = {}
        self._lock = threading.Lock()

    # Scope managers

    @property
    def preferences(self) -> PreferencesManager:
        return self.context.managers[ConfigScope.PREFERENCES]

    @property
    def native_settings(self) -> NativeSettingsManager:
        return self.context.managers[ConfigScope.NATIVE_SETTINGS]

    @property
    def runtime_state(self) -> RuntimeStateManager:
        return self.context.managers[ConfigScope.RUNTIME_STATE]

    def manager(self, scope: ConfigScope | str) -> ScopeManager:
        return self.context.manager(scope)

    def _scopes(self, scope: ConfigScope | str) -> tuple[ConfigScope, ...]:
        scope = ConfigScope(scope)
        return ConfigScope.concrete() if scope == ConfigScope.ALL else (scope,)

    # Documents

    def read(self, scope: ConfigScope | str) -> dict[str, Any] | None:
        """
        Read one document, or every document keyed by scope name for ``all``.

        Missing files read as None.
        """
        if ConfigScope(scope) == ConfigScope.ALL:
            return {s.value: self.manager(s).read() for s in ConfigScope.concrete()}
        return self.manager(scope).read()

    def write(self, scope: ConfigScope | str, doc: dict[str, Any]) -> dict[str, Any]:
        manager = self.manager(scope)
        return self._tracked(manager, lambda: manager.write(doc))

    def update(self, scope: ConfigScope | str, partial: dict[str, Any]) -> dict[str, Any]:
        manager = self.manager(scope)
        return self._tracked(manager, lambda: manager.update(partial))

    def validate(self, scope: ConfigScope | str) -> ValidationResult | dict[str, ValidationResult]:
        """Validate one scope, or every scope keyed by name for ``all``."""
        if ConfigScope(scope) == ConfigScope.ALL:
            return {s.value: self.manager(s).validate() for s in ConfigScope.concrete()}
        return self.manager(scope).validate()

    def get(self, scope: ConfigScope | str, path: str, default: Any = None) -> Any:
        """
        Read one value by dotted path.

        Raises:
            SchemaPathError: If the schema does not declare ``path``.
        """
        return self.manager(scope).get(path, default)

    def set(self, scope: ConfigScope | str, path: str, value: Any) -> dict[str, Any]:
        """
        Write one value by dotted path and persist the whole document.

        Raises:
            SchemaPathError: If the schema does not declare ``path``.
            ConfigValidationError: If the resulting document is invalid.
        """
        manager = self.manager(scope)
        return self._tracked(manager, lambda: manager.set(path, value))

    # Merging

    def merge(
        self, base: dict[str, Any], source: dict[str, Any], options: MergeOptions | None = None
    ) -> MergeResult:
        return merge(base, source, options)

    def apply_template(
        self,
        scope: ConfigScope | str,
        template: dict[str, Any],
        options: MergeOptions | None = None,
    ) -> MergeResult:
        """
        Merge a template into a scope's current document and persist it.

        Uses the scope's own merge rules (sticky language and tool for
        preferences, user env and permission union for native settings).
        Conflicts are returned, never prompted for.
        """
        scope = ConfigScope(scope)
        manager = self.manager(scope)
        outcome = _SCOPE_MERGES[scope](manager.get_or_default(), template, options)
        outcome.result = self._tracked(manager, lambda: manager.write(outcome.result))
        if outcome.conflicts:
            log.info("Applied template to {} with {} conflicts", scope.value, len(outcome.conflicts))
        return outcome

    # Migration

    def migrate(self, options: MigrationOptions | None = None) -> MigrationResult:
        """Run pending legacy migrations; watched scopes receive ``migration`` events."""
        before = {scope: self._current(self.manager(scope)) for scope in self._watched()}
        result = self.context.migration_engine().run_migrations(options)
        for scope, old in before.items():
            if scope.value in result.migrated_scopes:
                self._publish(scope, old, self._current(self.manager(scope)), ChangeSource.MIGRATION)
        return result

    def needs_migration(self) -> bool:
        return self.context.migration_engine().needs_migration()

    def migration_status(self) -> MigrationStatus:
        return self.context.migration_engine().status()

    # Maintenance

    def backup(self, scope: ConfigScope | str) -> dict[str, Path | None]:
        """
        Back up one or all scope files next to themselves.

        Returns:
            Backup path per scope name; None where there was no file.
        """
        return {s.value: self.manager(s).backup() for s in self._scopes(scope)}

    def reset(self, scope: ConfigScope | str, *, backup: bool = True) -> list[ResetResult]:
        """
        Reset one or all scopes to defaults, backing each file up first.

        Raises:
            StoreError: If a backup cannot be taken; that scope is left untouched.
        """
        results = []
        for s in self._scopes(scope):
            manager = self.manager(s)
            old = self._current(manager)
            outcome = manager.reset(backup=backup)
            self._publish(s, old, outcome.document, ChangeSource.API)
            log.info("Reset {} (backup: {})", s.value, outcome.backup_path)
            results.append(outcome)
        return results

    # Hot reload

    def watch(self, scope: ConfigScope | str, handler: ChangeHandler) -> Callable[[], None]:
        """
        Subscribe to changes of one or all scopes.

        The watcher for a scope is started on first subscription and shared
        by later subscribers.

        Returns:
            A function that removes the subscription(s).
        """
        unsubscribers = [self._watcher(s).subscribe(handler) for s in self._scopes(scope)]

        def unsubscribe() -> None:
            for remove in unsubscribers:
                remove()

        return unsubscribe

    def close(self) -> None:
        """Stop every watcher started by this object."""
        with self._lock:
            watchers, self._watchers = list(self._watchers.values()), {}
        for watcher in watchers:
            watcher.stop()

    def __enter__(self) -> UnifiedConfig:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _watcher(self, scope: ConfigScope) -> HotReloadWatcher:
        with self._lock:
            watcher = self._watchers.get(scope)
            if watcher is not None:
                return watcher
            manager = self.manager(scope)
            watcher = HotReloadWatcher(
                manager.path,
                manager.read,
                validator=manager.validator,
                debounce=self.context.debounce,
                backend=self.context.watch_backend(),
                restart_backoff=self.context.restart_backoff,
            )
            self._watchers[scope] = watcher
        watcher.start()
        return watcher

    def _watched(self) -> list[ConfigScope]:
        with self._lock:
            return list(self._watchers)

    def _current(self, manager: ScopeManager) -> dict[str, Any]:
        try:
            return manager.read() or {}
        except ConfigParseError:
            return manager.last_known_good or {}

    def _tracked(self, manager: ScopeManager, operation: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        if manager.scope not in self._watched():
            return operation()
        old = self._current(manager)
        doc = operation()
        self._publish(manager.scope, old, doc, ChangeSource.API)
        return doc

    def _publish(self, scope: ConfigScope, old: dict[str, Any], new: dict[str, Any], source: ChangeSource) -> None:
        with self._lock:
            watcher = self._watchers.get(scope)
        if watcher is None:
            return
        events = compute_changes(old, new, source, now=self.context.clock())
        watcher.publish(events, snapshot=new)
