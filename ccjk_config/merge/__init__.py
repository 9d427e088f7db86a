# CCJK Config Merge Module
# Generic and scope-specific document merging

from ccjk_config.merge.engine import (
    ArrayMerge,
    MergeConflict,
    MergeOptions,
    MergeResult,
    MergeStrategy,
    SourceInfo,
    detect_conflicts,
    merge,
    unique_union,
)
from ccjk_config.merge.scopes import merge_native_settings, merge_preferences

__all__ = [
    "ArrayMerge",
    "MergeConflict",
    "MergeOptions",
    "MergeResult",
    "MergeStrategy",
    "SourceInfo",
    "detect_conflicts",
    "merge",
    "merge_native_settings",
    "merge_preferences",
    "unique_union",
]
