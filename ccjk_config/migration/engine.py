# CCJK Config Migration Engine
# Detects legacy sources, backs up, migrates per source and reports partial failures

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ccjk_config.errors import ConfigParseError, MigrationError, StoreError
from ccjk_config.logger import create_logger
from ccjk_config.migration.legacy import LegacyConfigInfo, detect_legacy
from ccjk_config.migration.steps import (
    DEFAULT_STEPS,
    MigrationResult,
    MigrationState,
    MigrationStep,
    SourceRecord,
)
from ccjk_config.scopes.base import ConfigScope, ScopeManager
from ccjk_config.store import AtomicFileStore
from ccjk_config.utils.clock import Clock, utc_now
from ccjk_config.utils.paths import unique_path

log = create_logger("migration")

BACKUP_DIR_FORMAT = "migration_%Y-%m-%d_%H-%M-%S"


@dataclass(frozen=True)
class MigrationOptions:
    backup: bool = True
    dry_run: bool = False
    force: bool = False


@dataclass
class MigrationStatus:
    """Summary for ``ccjk-config migrate --status``."""

    needs_migration: bool
    legacy: list[LegacyConfigInfo] = field(default_factory=list)
    versions: dict[str, str | None] = field(default_factory=dict)


@dataclass
class CleanupResult:
    deleted: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)


class MigrationEngine:
    """
    Drives legacy sources through the migration state machine.

    Each source moves ``DETECTED -> BACKED_UP -> TRANSFORMED -> PERSISTED ->
    VERIFIED``; a failure rolls its target back and leaves it ``UNMIGRATED``
    without stopping the other sources.
    """

    def __init__(
        self,
        managers: dict[ConfigScope, ScopeManager],
        legacy_paths: Sequence[Path],
        backup_root: Path,
        *,
        store: AtomicFileStore | None = None,
        steps: Sequence[MigrationStep] = DEFAULT_STEPS,
        clock: Clock | None = None,
    ):
        """
        Initialize engine.

        Args:
            managers: Scope managers keyed by scope.
            legacy_paths: Ordered search list, newest format first.
            backup_root: Directory receiving ``migration_<timestamp>`` backups.
            store: File store used for probing and backups.
            steps: Available migration steps.
            clock: Source of "now" for backup directory names.
        """
        self.managers = managers
        self.legacy_paths = list(legacy_paths)
        self.backup_root = Path(backup_root)
        self.store = store or AtomicFileStore()
        self.steps = list(steps)
        self.clock = clock or utc_now

    def detect_legacy(self) -> list[LegacyConfigInfo]:
        return detect_legacy(self.legacy_paths, self.store)

    def select_step(self, info: LegacyConfigInfo) -> MigrationStep:
        """
        Find the single step for a source.

        Raises:
            MigrationError: If no step or more than one step matches.
        """
        candidates = [step for step in self.steps if step.matches(info)]
        if not candidates:
            raise MigrationError(info.path, f"no migration step for {info.type.value} ({info.version})")
        if len(candidates) > 1:
            names = ", ".join(step.name for step in candidates)
            raise MigrationError(info.path, f"ambiguous migration steps for {info.type.value}: {names}")
        return candidates[0]

    def pending(self, legacy: list[LegacyConfigInfo], *, force: bool = False) -> list[LegacyConfigInfo]:
        """Sources whose target scope still needs them (every matching source when forced)."""
        result = []
        for info in legacy:
            manager = self.managers.get(info.target_scope)
            if manager is None:
                continue
            candidates = [step for step in self.steps if step.matches(info)]
            # Sources without exactly one step, or with an unreadable target, stay pending so run_migrations reports them
            if len(candidates) == 1:
                try:
                    if not candidates[0].detect(info, manager, force=force):
                        continue
                except StoreError as e:
                    log.warning("Cannot check {} before migrating {}: {}", manager.path, info.path, e)
            result.append(info)
        return result

    def needs_migration(self) -> bool:
        """True iff a legacy source exists and its target has no current document."""
        return bool(self.pending(self.detect_legacy()))

    def status(self) -> MigrationStatus:
        legacy = self.detect_legacy()
        versions: dict[str, str | None] = {}
        for scope, manager in self.managers.items():
            try:
                doc = manager.read()
            except ConfigParseError:
                doc = None
            if doc is None:
                versions[scope.value] = None
            else:
                versions[scope.value] = str(doc.get("version", "unknown")) if manager.versioned else "present"
        return MigrationStatus(needs_migration=bool(self.pending(legacy)), legacy=legacy, versions=versions)

    def create_backup(self, sources: list[LegacyConfigInfo]) -> Path:
        """
        Copy every scope file and every pending legacy file into a fresh backup directory.

        Returns:
            The backup directory; it never reuses an existing one.
        """
        backup_dir = unique_path(self.backup_root / self.clock().strftime(BACKUP_DIR_FORMAT))
        self.store.ensure_dir(backup_dir)
        for scope, manager in self.managers.items():
            if manager.exists():
                self.store.copy(manager.path, backup_dir / scope.value / manager.path.name)
        for index, info in enumerate(sources):
            self.store.copy(info.path, backup_dir / "legacy" / f"{index}_{info.path.name}")
        log.info("Created migration backup at {}", backup_dir)
        return backup_dir

    def run_migrations(self, options: MigrationOptions | None = None) -> MigrationResult:
        """
        Migrate every pending legacy source.

        Args:
            options: Backup, dry-run and force flags.

        Returns:
            Aggregated MigrationResult. ``success`` is False if any source
            failed; ``migrated_scopes`` still lists everything that succeeded.
        """
        options = options or MigrationOptions()
        result = MigrationResult()

        sources = self.pending(self.detect_legacy(), force=options.force)
        if not sources:
            return result

        records = [SourceRecord(info.path, info.type, info.target_scope, MigrationState.DETECTED) for info in sources]
        result.records = records

        if options.backup and not options.dry_run:
            try:
                result.backup_path = self.create_backup(sources)
            except StoreError as e:
                result.success = False
                result.errors.append(f"Backup failed, nothing migrated: {e}")
                return result
        for record in records:
            record.state = MigrationState.BACKED_UP

        done: set[ConfigScope] = set()
        for info, record in zip(sources, records):
            if info.target_scope in done:
                result.warnings.append(
                    f"Skipped {info.path}: {info.target_scope.value} already migrated from a newer source"
                )
                record.state = MigrationState.UNMIGRATED
                continue
            try:
                step = self.select_step(info)
                outcome = step.migrate(info, self.managers[info.target_scope], record, dry_run=options.dry_run)
            except MigrationError as e:
                log.error("Migration failed for {}: {}", info.path, e)
                record.error = str(e)
                record.state = MigrationState.UNMIGRATED
                result.success = False
                result.errors.append(str(e))
                continue

            done.add(info.target_scope)
            result.from_version = result.from_version or outcome.from_version
            result.to_version = outcome.to_version or result.to_version
            result.migrated_paths.extend(outcome.migrated_paths)
            result.migrated_scopes.extend(s for s in outcome.migrated_scopes if s not in result.migrated_scopes)
            result.warnings.extend(outcome.warnings)

        if done and not options.dry_run:
            self._initialize_runtime_state(result)

        log.info("Migration finished: scopes={} errors={}", result.migrated_scopes, len(result.errors))
        return result

    def _initialize_runtime_state(self, result: MigrationResult) -> None:
        manager = self.managers.get(ConfigScope.RUNTIME_STATE)
        if manager is None or manager.exists():
            return
        try:
            manager.write(manager.defaults())
        except StoreError as e:
            result.warnings.append(f"Could not initialize runtime state: {e}")
            return
        result.migrated_scopes.append(ConfigScope.RUNTIME_STATE.value)

    def cleanup_legacy(self, paths: Sequence[Path]) -> CleanupResult:
        """Delete migrated legacy files, reporting each failure."""
        cleanup = CleanupResult()
        for path in paths:
            try:
                if self.store.delete(Path(path)):
                    cleanup.deleted.append(Path(path))
            except StoreError as e:
                cleanup.failed.append((Path(path), str(e.cause)))
        return cleanup
