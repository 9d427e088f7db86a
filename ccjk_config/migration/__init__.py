# CCJK Config Migration Module
# Legacy detection and migration into the current scope documents

from ccjk_config.migration.engine import CleanupResult, MigrationEngine, MigrationOptions, MigrationStatus
from ccjk_config.migration.legacy import LegacyConfigInfo, LegacyType, classify, detect_legacy, legacy_paths
from ccjk_config.migration.steps import (
    DEFAULT_STEPS,
    ClaudeSettingsStep,
    MigrationResult,
    MigrationState,
    MigrationStep,
    SourceRecord,
    UnifiedStep,
    V1JsonStep,
    V2TomlStep,
)

__all__ = [
    # Engine
    "CleanupResult",
    "MigrationEngine",
    "MigrationOptions",
    "MigrationStatus",
    # Legacy detection
    "LegacyConfigInfo",
    "LegacyType",
    "classify",
    "detect_legacy",
    "legacy_paths",
    # Steps
    "DEFAULT_STEPS",
    "ClaudeSettingsStep",
    "MigrationResult",
    "MigrationState",
    "MigrationStep",
    "SourceRecord",
    "UnifiedStep",
    "V1JsonStep",
    "V2TomlStep",
]
