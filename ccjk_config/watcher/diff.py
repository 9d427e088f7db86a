# CCJK Config Change Events
# Leaf-level diff between two document snapshots

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ccjk_config.schema.validator import join_path
from ccjk_config.utils.clock import utc_now

_MISSING = object()


def _is_map(value: Any) -> bool:
    return isinstance(value, dict) or value is _MISSING


def _empty_vs_missing(left: Any, right: Any) -> bool:
    return (left is _MISSING and right == {}) or (right is _MISSING and left == {})


class ChangeSource(str, Enum):
    FILE = "file"
    API = "api"
    MIGRATION = "migration"


@dataclass(frozen=True)
class ConfigChangeEvent:
    """One changed leaf. ``None`` stands for an absent value on either side."""

    path: str
    old_value: Any
    new_value: Any
    source: ChangeSource = ChangeSource.FILE
    timestamp: datetime = field(default_factory=utc_now)


def compute_changes(
    old: dict[str, Any] | None,
    new: dict[str, Any] | None,
    source: ChangeSource = ChangeSource.FILE,
    *,
    now: datetime | None = None,
) -> list[ConfigChangeEvent]:
    """
    Diff two documents into one event per changed leaf path.

    Objects are recursed into, including objects that exist on one side
    only. An empty object that appears or disappears is reported whole at
    its own path, as are arrays and scalars. Paths come out in old-document
    order followed by keys new to the document.
    """
    moment = now or utc_now()
    events: list[ConfigChangeEvent] = []

    def walk(left: Any, right: Any, path: str) -> None:
        # An empty object added or removed has no leaves, so it is reported at its own path
        if _is_map(left) and _is_map(right) and not _empty_vs_missing(left, right):
            left_map = left if isinstance(left, dict) else {}
            right_map = right if isinstance(right, dict) else {}
            for key in [*left_map, *(k for k in right_map if k not in left_map)]:
                walk(left_map.get(key, _MISSING), right_map.get(key, _MISSING), join_path(path, key))
            return
        if left == right and type(left) is type(right):
            return
        events.append(
            ConfigChangeEvent(
                path=path,
                old_value=None if left is _MISSING else copy.deepcopy(left),
                new_value=None if right is _MISSING else copy.deepcopy(right),
                source=source,
                timestamp=moment,
            )
        )

    walk(old or {}, new or {}, "")
    return events
