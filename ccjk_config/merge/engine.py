# CCJK Config Merge Engine
# Deterministic deep merge with pluggable conflict strategies and array policies

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ccjk_config.schema.validator import join_path


class MergeStrategy(str, Enum):
    """How overlapping keys are resolved."""

    REPLACE = "replace"  # top-level overlay
    MERGE = "merge"  # deep merge, source wins
    PRESERVE = "preserve"  # base wins, only add missing keys
    ASK = "ask"  # deep merge, every overlap reported


class ArrayMerge(str, Enum):
    """How two arrays at the same path are combined."""

    REPLACE = "replace"
    CONCAT = "concat"
    UNIQUE = "unique"


@dataclass(frozen=True)
class MergeOptions:
    strategy: MergeStrategy = MergeStrategy.MERGE
    array_merge: ArrayMerge = ArrayMerge.REPLACE


@dataclass
class MergeConflict:
    """An overlapping value the caller may want to surface."""

    path: str
    base_value: Any
    source_value: Any
    chosen_value: Any
    strategy: MergeStrategy


@dataclass
class SourceInfo:
    """Which paths the source contributed."""

    strategy: MergeStrategy
    array_merge: ArrayMerge
    added: list[str] = field(default_factory=list)
    overridden: list[str] = field(default_factory=list)


@dataclass
class MergeResult:
    """Result of merging a source document into a base document."""

    result: dict[str, Any]
    conflicts: list[MergeConflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source_info: SourceInfo | None = None

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def unique_union(first: list[Any], second: list[Any]) -> list[Any]:
    """
    Union of two lists preserving first-seen order.

    Uses equality rather than hashing so nested objects deduplicate too.
    """
    merged: list[Any] = []
    for item in [*first, *second]:
        if item not in merged:
            merged.append(item)
    return merged


def merge_arrays(base: list[Any], source: list[Any], policy: ArrayMerge) -> list[Any]:
    if policy == ArrayMerge.CONCAT:
        return [*base, *source]
    if policy == ArrayMerge.UNIQUE:
        return unique_union(base, source)
    return list(source)


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


class _Merger:
    def __init__(self, options: MergeOptions):
        self.options = options
        self.conflicts: list[MergeConflict] = []
        self.warnings: list[str] = []
        self.info = SourceInfo(strategy=options.strategy, array_merge=options.array_merge)

    def conflict(self, path: str, base: Any, source: Any, chosen: Any) -> None:
        self.conflicts.append(
            MergeConflict(
                path=path,
                base_value=copy.deepcopy(base),
                source_value=copy.deepcopy(source),
                chosen_value=copy.deepcopy(chosen),
                strategy=self.options.strategy,
            )
        )

    def replace(self, base: dict, source: dict) -> dict:
        result = dict(base)
        for key, value in source.items():
            if key in base:
                self.info.overridden.append(key)
            else:
                self.info.added.append(key)
            result[key] = value
        return result

    def preserve(self, base: dict, source: dict, path: str) -> dict:
        result = dict(base)
        for key, value in source.items():
            key_path = join_path(path, key)
            if key not in base:
                result[key] = value
                self.info.added.append(key_path)
            elif isinstance(base[key], dict) and isinstance(value, dict):
                result[key] = self.preserve(base[key], value, key_path)
        return result

    def deep(self, base: dict, source: dict, path: str) -> dict:
        ask = self.options.strategy == MergeStrategy.ASK
        result = dict(base)
        for key, incoming in source.items():
            key_path = join_path(path, key)
            if key not in base:
                result[key] = incoming
                self.info.added.append(key_path)
                continue

            current = base[key]
            if isinstance(current, dict) and isinstance(incoming, dict):
                result[key] = self.deep(current, incoming, key_path)
                continue

            if isinstance(current, list) and isinstance(incoming, list):
                chosen = merge_arrays(current, incoming, self.options.array_merge)
                if ask:
                    self.conflict(key_path, current, incoming, chosen)
            else:
                chosen = incoming
                if isinstance(current, (dict, list)) or isinstance(incoming, (dict, list)):
                    self.warnings.append(f"Type changed at {key_path}: {_kind(current)} -> {_kind(incoming)}")
                if ask or current != incoming or type(current) is not type(incoming):
                    self.conflict(key_path, current, incoming, chosen)

            if chosen != current:
                self.info.overridden.append(key_path)
            result[key] = chosen
        return result


def merge(base: dict[str, Any], source: dict[str, Any], options: MergeOptions | None = None) -> MergeResult:
    """
    Merge ``source`` into ``base`` without mutating either.

    Keys keep base order, followed by source-only keys in source order.
    Conflicts are recorded for ``merge`` (differing scalars) and ``ask``
    (every overlapping leaf); ``replace`` and ``preserve`` never report any.

    Args:
        base: Existing document.
        source: Incoming document (template, legacy data, ...).
        options: Strategy and array policy.

    Returns:
        MergeResult with the merged tree and any conflicts.
    """
    options = options or MergeOptions()
    base = copy.deepcopy(base)
    source = copy.deepcopy(source)
    merger = _Merger(options)

    if options.strategy == MergeStrategy.REPLACE:
        result = merger.replace(base, source)
    elif options.strategy == MergeStrategy.PRESERVE:
        result = merger.preserve(base, source, "")
    else:
        result = merger.deep(base, source, "")

    return MergeResult(
        result=copy.deepcopy(result),
        conflicts=merger.conflicts,
        warnings=merger.warnings,
        source_info=merger.info,
    )


def detect_conflicts(base: dict[str, Any], source: dict[str, Any]) -> list[MergeConflict]:
    """
    List leaf-level differences between overlapping keys without merging.

    Objects present on both sides are recursed into; arrays and scalars are
    compared as a whole. Keys present on only one side are not conflicts.
    """
    conflicts: list[MergeConflict] = []

    def walk(left: dict, right: dict, path: str) -> None:
        for key, incoming in right.items():
            if key not in left:
                continue
            key_path = join_path(path, key)
            current = left[key]
            if isinstance(current, dict) and isinstance(incoming, dict):
                walk(current, incoming, key_path)
            elif current != incoming or type(current) is not type(incoming):
                conflicts.append(
                    MergeConflict(
                        path=key_path,
                        base_value=copy.deepcopy(current),
                        source_value=copy.deepcopy(incoming),
                        chosen_value=copy.deepcopy(incoming),
                        strategy=MergeStrategy.MERGE,
                    )
                )

    walk(base, source, "")
    return conflicts
