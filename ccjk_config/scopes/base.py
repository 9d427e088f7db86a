# CCJK Config Scope Manager Base
# Read/validate/stamp/persist lifecycle shared by every configuration scope

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from ccjk_config.codecs import JSON, Codec, DecodeError
from ccjk_config.errors import ConfigParseError, ConfigValidationError, ConfigVersionError
from ccjk_config.logger import create_logger
from ccjk_config.schema.fields import SchemaField
from ccjk_config.schema.validator import SchemaValidator, ValidationResult
from ccjk_config.schema.walker import get_value, set_value
from ccjk_config.store import AtomicFileStore
from ccjk_config.utils.clock import Clock, iso_timestamp, utc_now
from ccjk_config.utils.versioning import compare_versions

log = create_logger("scopes")


class ConfigScope(str, Enum):
    """Independently persisted configuration documents."""

    PREFERENCES = "preferences"
    NATIVE_SETTINGS = "native-settings"
    RUNTIME_STATE = "runtime-state"
    ALL = "all"

    @classmethod
    def concrete(cls) -> tuple[ConfigScope, ...]:
        return (cls.PREFERENCES, cls.NATIVE_SETTINGS, cls.RUNTIME_STATE)


@dataclass
class ResetResult:
    """Outcome of resetting a scope to defaults."""

    scope: ConfigScope
    document: dict[str, Any]
    backup_path: Path | None = None


class ScopeManager:
    """
    Owns one configuration document and its backing file.

    Subclasses declare the scope, schema, codec, current version (None for
    unversioned documents) and the section paths that ``update`` merges
    independently, and implement :meth:`defaults`.
    """

    scope: ClassVar[ConfigScope]
    schema: ClassVar[SchemaField]
    codec: ClassVar[Codec] = JSON
    current_version: ClassVar[str | None] = None
    sections: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        path: Path,
        store: AtomicFileStore | None = None,
        *,
        clock: Clock | None = None,
        preferred_lang: str = "en",
        install_type: str = "global",
    ):
        """
        Initialize manager.

        Args:
            path: Backing file.
            store: File store (default: a new AtomicFileStore).
            clock: Source of "now" for timestamps.
            preferred_lang: Input to the defaults factory.
            install_type: Input to the defaults factory.
        """
        self.path = Path(path)
        self.store = store or AtomicFileStore()
        self.clock = clock or utc_now
        self.preferred_lang = preferred_lang
        self.install_type = install_type
        self.validator = SchemaValidator(self.schema)
        self._last_good: dict[str, Any] | None = None
        self._last_version: str | None = None

    @property
    def versioned(self) -> bool:
        return self.current_version is not None

    @property
    def last_known_good(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._last_good)

    def defaults(self) -> dict[str, Any]:
        """Fully populated default document."""
        raise NotImplementedError

    def decode(self, data: bytes) -> dict[str, Any]:
        """
        Decode raw bytes into a document.

        Raises:
            ConfigParseError: If the bytes are not a valid document.
        """
        try:
            return self.codec.decode(data)
        except DecodeError as e:
            raise ConfigParseError(self.path, e) from e

    def read(self) -> dict[str, Any] | None:
        """
        Read the document from disk.

        Returns:
            The document, or None if the file does not exist.

        Raises:
            ConfigParseError: If the file cannot be parsed. The last known
                good document stays available via ``last_known_good``.
        """
        data = self.store.read(self.path)
        if data is None:
            return None
        try:
            doc = self.decode(data)
        except ConfigParseError:
            log.warning("Could not parse {} file {}", self.scope.value, self.path)
            raise
        self._remember(doc)
        return copy.deepcopy(doc)

    def get_or_default(self) -> dict[str, Any]:
        """Current document, falling back to the last good one or to defaults. Never None."""
        try:
            doc = self.read()
        except ConfigParseError as e:
            log.warning("Using fallback for {}: {}", self.scope.value, e)
            return self.last_known_good or self.defaults()
        return doc if doc is not None else self.defaults()

    def validate(self, doc: dict[str, Any] | None = None) -> ValidationResult:
        """Validate ``doc``, or the current document when omitted."""
        return self.validator.validate(doc if doc is not None else self.get_or_default())

    def write(self, doc: dict[str, Any]) -> dict[str, Any]:
        """
        Validate, stamp and atomically persist a document.

        Args:
            doc: Complete document.

        Returns:
            The document as written (with ``lastUpdated`` for versioned scopes).

        Raises:
            ConfigValidationError: If the document is invalid. Nothing is written.
            ConfigVersionError: If the version would go backwards.
            StoreError: If persisting fails.
        """
        doc = copy.deepcopy(doc)
        if self.versioned:
            doc.setdefault("version", self.current_version)
            self._check_version(str(doc["version"]))
            doc["lastUpdated"] = iso_timestamp(self.clock())

        result = self.validate(doc)
        if not result.valid:
            raise ConfigValidationError(self.scope.value, result)
        for warning in result.warnings:
            log.debug("{}: {} ({})", self.scope.value, warning.message, warning.path)

        self.store.write(self.path, self.codec.encode(doc))
        self._remember(doc)
        log.info("Saved {} to {}", self.scope.value, self.path)
        return copy.deepcopy(doc)

    def update(self, partial: dict[str, Any]) -> dict[str, Any]:
        """
        Merge a partial document section by section, then write.

        Each declared section (e.g. ``general``, ``tools.claudeCode``) is
        shallow-merged on its own; other keys are replaced.
        """
        return self.write(self.merge_sections(self.get_or_default(), partial))

    def merge_sections(self, current: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
        result = copy.deepcopy(current)

        for section in self.sections:
            incoming = get_value(partial, section)
            if incoming is None:
                continue
            existing = get_value(result, section)
            if isinstance(existing, dict) and isinstance(incoming, dict):
                incoming = {**existing, **incoming}
            result = set_value(result, section, incoming)

        for key, value in partial.items():
            if key in self.sections:
                continue
            nested = [s.split(".", 1)[1] for s in self.sections if s.startswith(f"{key}.")]
            if nested and isinstance(value, dict):
                container = result.get(key) if isinstance(result.get(key), dict) else {}
                for child, child_value in value.items():
                    if child not in nested:
                        container[child] = copy.deepcopy(child_value)
                result[key] = container
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, path: str, default: Any = None) -> Any:
        """Typed point-read; raises SchemaPathError for paths the schema does not declare."""
        return get_value(self.get_or_default(), path, self.schema, default)

    def set(self, path: str, value: Any) -> dict[str, Any]:
        """Typed point-write followed by a full validated write."""
        return self.write(set_value(self.get_or_default(), path, value, self.schema))

    def backup(self) -> Path | None:
        return self.store.backup(self.path)

    def delete(self) -> bool:
        deleted = self.store.delete(self.path)
        self._last_good = None
        self._last_version = None
        if deleted:
            log.info("Deleted {} file {}", self.scope.value, self.path)
        return deleted

    def reset(self, *, backup: bool = True) -> ResetResult:
        """
        Replace the document with defaults, backing up the old file first.

        The backup path is known before anything is overwritten.
        """
        backup_path = self.backup() if backup else None
        self._last_version = None
        doc = self.write(self.defaults())
        return ResetResult(scope=self.scope, document=doc, backup_path=backup_path)

    def snapshot(self) -> bytes | None:
        """Raw bytes of the backing file, for :meth:`restore`."""
        return self.store.read(self.path)

    def restore(self, snapshot: bytes | None) -> None:
        """Put back bytes taken by :meth:`snapshot`; None removes the file."""
        if snapshot is None:
            self.store.delete(self.path)
        else:
            self.store.write(self.path, snapshot)
        self._last_good = None
        self._last_version = None
        log.info("Restored {} file {}", self.scope.value, self.path)

    def exists(self) -> bool:
        return self.store.exists(self.path)

    def has_current_document(self) -> bool:
        """True if the file holds a parseable document at the current version."""
        try:
            doc = self.read()
        except ConfigParseError:
            return False
        if doc is None:
            return False
        if not self.versioned:
            return True
        return compare_versions(str(doc.get("version", "")), self.current_version) >= 0

    def _check_version(self, version: str) -> None:
        if self._last_version is not None and compare_versions(version, self._last_version) < 0:
            raise ConfigVersionError(self.scope.value, self._last_version, version)

    def _remember(self, doc: dict[str, Any]) -> None:
        self._last_good = copy.deepcopy(doc)
        if self.versioned and doc.get("version") is not None:
            self._last_version = str(doc["version"])
