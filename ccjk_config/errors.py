# CCJK Config Errors
# Exception taxonomy for store, parse, validation, migration and watch failures

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ccjk_config.schema.validator import ValidationResult


class ConfigError(Exception):
    """Base class for all configuration platform errors."""


class StoreError(ConfigError):
    """An I/O operation on a backing file failed."""

    def __init__(self, operation: str, path: Path, cause: BaseException):
        self.operation = operation
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to {operation} {self.path}: {cause}")


class ConfigParseError(ConfigError):
    """A backing file exists but could not be decoded into a document."""

    def __init__(self, path: Path, cause: BaseException | str):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not parse {self.path}: {cause}")


class ConfigValidationError(ConfigError):
    """A document failed schema validation and was not persisted."""

    def __init__(self, scope: str, result: ValidationResult):
        self.scope = scope
        self.result = result
        details = "; ".join(f"{e.path}: {e.message}" for e in result.errors[:5])
        more = f" (+{len(result.errors) - 5} more)" if len(result.errors) > 5 else ""
        super().__init__(f"Invalid {scope} document: {details}{more}")


class ConfigVersionError(ConfigError):
    """A write would move a document's version backwards."""

    def __init__(self, scope: str, current: str, attempted: str):
        self.scope = scope
        self.current = current
        self.attempted = attempted
        super().__init__(f"Refusing to downgrade {scope} from version {current} to {attempted}")


class SchemaPathError(ConfigError):
    """A dot path does not resolve against a schema tree."""

    def __init__(self, path: str, segment: str, available: Sequence[str] = ()):
        self.path = path
        self.segment = segment
        self.available = list(available)
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Path '{path}' not found at segment '{segment}'{hint}")


class MigrationError(ConfigError):
    """A single legacy source could not be migrated."""

    def __init__(self, source: Path | str, message: str):
        self.source = str(source)
        super().__init__(f"{self.source}: {message}")


class WatcherError(ConfigError):
    """The low-level file watch failed."""
