# CCJK Config Migration Steps
# One step per legacy format: pure transform into a fully defaulted current document

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from ccjk_config.errors import MigrationError, StoreError
from ccjk_config.logger import create_logger
from ccjk_config.merge.engine import MergeOptions, MergeStrategy, merge
from ccjk_config.merge.scopes import merge_native_settings
from ccjk_config.migration.legacy import LegacyConfigInfo, LegacyType
from ccjk_config.schema.definitions import (
    INSTALL_TYPES,
    PREFERENCES_VERSION,
    SUPPORTED_LANGS,
    SUPPORTED_TOOLS,
)
from ccjk_config.scopes.base import ConfigScope, ScopeManager
from ccjk_config.scopes.preferences import DEFAULT_SYSTEM_PROMPT_STYLE, DEFAULT_TOOL

log = create_logger("migration")


class MigrationState(str, Enum):
    """Position of one legacy source in the migration state machine."""

    UNMIGRATED = "unmigrated"
    DETECTED = "detected"
    BACKED_UP = "backed-up"
    TRANSFORMED = "transformed"
    PERSISTED = "persisted"
    VERIFIED = "verified"


@dataclass
class SourceRecord:
    """Progress of one legacy source through a migration run."""

    path: Path
    type: LegacyType
    target_scope: ConfigScope
    state: MigrationState = MigrationState.UNMIGRATED
    error: str | None = None


@dataclass
class MigrationResult:
    """Outcome of migrating one source or a whole batch."""

    success: bool = True
    from_version: str | None = None
    to_version: str | None = None
    migrated_paths: list[str] = field(default_factory=list)
    migrated_scopes: list[str] = field(default_factory=list)
    backup_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    records: list[SourceRecord] = field(default_factory=list)


def _compact(value: Any) -> Any:
    """Drop None values so they never override defaults."""
    if isinstance(value, dict):
        return {k: _compact(v) for k, v in value.items() if v is not None}
    return value


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _pick(value: Any, allowed: tuple[str, ...], fallback: str) -> str:
    return value if value in allowed else fallback


class MigrationStep:
    """
    Migrates one legacy format into one scope.

    ``transform`` is pure: legacy tree plus scope defaults in, complete
    current document out. ``migrate`` persists through the scope manager and
    verifies the read-back; ``rollback`` restores the previous target bytes.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    source_type: ClassVar[LegacyType]
    target_scope: ClassVar[ConfigScope]
    target_version: ClassVar[str | None] = None

    def matches(self, info: LegacyConfigInfo) -> bool:
        return info.type == self.source_type

    def detect(self, info: LegacyConfigInfo, manager: ScopeManager, *, force: bool = False) -> bool:
        """True if ``info`` is this step's format and the target is not already current."""
        if not self.matches(info):
            return False
        return force or not manager.has_current_document()

    def transform(self, data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def migrate(
        self,
        info: LegacyConfigInfo,
        manager: ScopeManager,
        record: SourceRecord,
        *,
        dry_run: bool = False,
    ) -> MigrationResult:
        """
        Transform, persist and verify one source.

        Raises:
            MigrationError: After rolling back, if any stage fails.
        """
        try:
            snapshot = manager.snapshot()
        except StoreError as e:
            record.state = MigrationState.UNMIGRATED
            raise MigrationError(info.path, f"cannot read current {self.target_scope.value} file: {e}") from e
        persisted = False
        try:
            doc = self.transform(copy.deepcopy(info.data), manager.defaults())
            validation = manager.validate(doc)
            if not validation.valid:
                first = validation.errors[0]
                raise MigrationError(info.path, f"transformed document is invalid at {first.path}: {first.message}")
            record.state = MigrationState.TRANSFORMED

            result = MigrationResult(
                from_version=info.version,
                to_version=self.target_version,
                migrated_paths=[str(info.path)],
                migrated_scopes=[self.target_scope.value],
            )
            if dry_run:
                result.warnings.append(f"Dry run: {info.path} would be migrated to {self.target_scope.value}")
                return result

            persisted = True
            written = manager.write(doc)
            record.state = MigrationState.PERSISTED

            if manager.read() != written:
                raise MigrationError(info.path, "read-back does not match written document")
            record.state = MigrationState.VERIFIED
            return result
        except Exception as e:
            if persisted:
                self.rollback(manager, snapshot)
            record.state = MigrationState.UNMIGRATED
            if isinstance(e, MigrationError):
                raise
            raise MigrationError(info.path, str(e)) from e

    def rollback(self, manager: ScopeManager, snapshot: bytes | None) -> None:
        log.warning("Rolling back {} after failed migration", manager.path)
        manager.restore(snapshot)


class V1JsonStep(MigrationStep):
    name = "v1-json-to-preferences"
    description = "Migrate legacy JSON config (.zcf-config.json) to preferences"
    source_type = LegacyType.V1_JSON
    target_scope = ConfigScope.PREFERENCES
    target_version = PREFERENCES_VERSION

    def transform(self, data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
        lang = _pick(data.get("preferredLang"), SUPPORTED_LANGS, defaults["general"]["preferredLang"])
        tool = _pick(data.get("codeToolType"), SUPPORTED_TOOLS, DEFAULT_TOOL)
        claude_code: dict[str, Any] = {
            "enabled": True,
            "outputStyles": data.get("outputStyles"),
            "defaultOutputStyle": data.get("defaultOutputStyle"),
            "currentProfile": data.get("currentProfileId"),
        }
        install_type = _table(data, "claudeCodeInstallation").get("type")
        if install_type in INSTALL_TYPES:
            claude_code["installType"] = install_type
        legacy = {
            "general": {
                "preferredLang": lang,
                "templateLang": _pick(data.get("templateLang"), SUPPORTED_LANGS, lang),
                "aiOutputLang": data.get("aiOutputLang") or lang,
                "currentTool": tool,
            },
            "tools": {
                "claudeCode": claude_code,
                "codex": {
                    "enabled": tool == "codex",
                    "systemPromptStyle": data.get("systemPromptStyle") or DEFAULT_SYSTEM_PROMPT_STYLE,
                },
            },
        }
        return merge(defaults, _compact(legacy), MergeOptions(strategy=MergeStrategy.MERGE)).result


class V2TomlStep(MigrationStep):
    name = "v2-toml-to-preferences"
    description = "Migrate TOML config (~/.ufomiao/zcf/config.toml) to preferences"
    source_type = LegacyType.V2_TOML
    target_scope = ConfigScope.PREFERENCES
    target_version = PREFERENCES_VERSION

    def transform(self, data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
        general = _table(data, "general")
        claude_code = _table(data, "claudeCode")
        codex = _table(data, "codex")
        lang = _pick(general.get("preferredLang"), SUPPORTED_LANGS, defaults["general"]["preferredLang"])
        legacy = {
            "general": {
                "preferredLang": lang,
                "templateLang": _pick(general.get("templateLang"), SUPPORTED_LANGS, lang),
                "aiOutputLang": general.get("aiOutputLang") or lang,
                "currentTool": _pick(general.get("currentTool"), SUPPORTED_TOOLS, DEFAULT_TOOL),
            },
            "tools": {
                "claudeCode": {
                    "enabled": claude_code.get("enabled") is not False,
                    "installType": _pick(claude_code.get("installType"), INSTALL_TYPES, defaults["tools"]["claudeCode"]["installType"]),
                    "outputStyles": claude_code.get("outputStyles"),
                    "defaultOutputStyle": claude_code.get("defaultOutputStyle"),
                    "currentProfile": claude_code.get("currentProfile"),
                    "profiles": _table(claude_code, "profiles") or None,
                    "version": claude_code.get("version"),
                },
                "codex": {
                    "enabled": codex.get("enabled") is True,
                    "systemPromptStyle": codex.get("systemPromptStyle") or DEFAULT_SYSTEM_PROMPT_STYLE,
                },
            },
        }
        return merge(defaults, _compact(legacy)).result


class UnifiedStep(MigrationStep):
    name = "unified-toml-to-preferences"
    description = "Migrate unified v4 config (~/.ccjk/config.toml) to preferences"
    source_type = LegacyType.UNIFIED
    target_scope = ConfigScope.PREFERENCES
    target_version = PREFERENCES_VERSION

    def transform(self, data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
        general = _table(data, "general")
        tools = _table(data, "tools")
        claude_code = _table(tools, "claudeCode")
        codex = _table(tools, "codex")
        lang = _pick(general.get("preferredLang"), SUPPORTED_LANGS, defaults["general"]["preferredLang"])
        stamp = defaults["lastUpdated"]
        profiles = {
            name: {"name": name, "settings": settings, "createdAt": stamp, "updatedAt": stamp}
            for name, settings in _table(claude_code, "profiles").items()
            if isinstance(settings, dict)
        }
        legacy = {
            "general": {
                "preferredLang": lang,
                "templateLang": _pick(general.get("templateLang"), SUPPORTED_LANGS, lang),
                "aiOutputLang": general.get("aiOutputLang") or lang,
                "currentTool": _pick(general.get("currentTool"), SUPPORTED_TOOLS, DEFAULT_TOOL),
            },
            "tools": {
                "claudeCode": {
                    "enabled": claude_code.get("enabled") is not False,
                    "installType": _pick(claude_code.get("installType"), INSTALL_TYPES, defaults["tools"]["claudeCode"]["installType"]),
                    "outputStyles": claude_code.get("outputStyles"),
                    "defaultOutputStyle": claude_code.get("defaultOutputStyle"),
                    "currentProfile": claude_code.get("currentProfile"),
                    "profiles": profiles or None,
                    "version": claude_code.get("version"),
                },
                "codex": {
                    "enabled": codex.get("enabled") is True,
                    "systemPromptStyle": codex.get("systemPromptStyle") or DEFAULT_SYSTEM_PROMPT_STYLE,
                },
            },
        }
        return merge(defaults, _compact(legacy)).result


class ClaudeSettingsStep(MigrationStep):
    name = "claude-config-to-native-settings"
    description = "Migrate legacy ~/.claude/config.json to settings.json"
    source_type = LegacyType.CLAUDE_SETTINGS
    target_scope = ConfigScope.NATIVE_SETTINGS

    def transform(self, data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
        # Legacy values win; defaults only fill gaps and extend permission lists
        return merge_native_settings(data, defaults, MergeOptions(strategy=MergeStrategy.PRESERVE)).result


DEFAULT_STEPS: tuple[MigrationStep, ...] = (V1JsonStep(), V2TomlStep(), UnifiedStep(), ClaudeSettingsStep())
