# CCJK Config Scope Merges
# Scope-aware merges: user env values win, permission lists union, sticky language/tool choices

from __future__ import annotations

import copy
from typing import Any

from ccjk_config.merge.engine import (
    MergeConflict,
    MergeOptions,
    MergeResult,
    MergeStrategy,
    merge,
    unique_union,
)

STICKY_PREFERENCES = ("preferredLang", "currentTool")
PERMISSION_LISTS = ("allow", "deny")


def merge_native_settings(
    base: dict[str, Any],
    template: dict[str, Any],
    options: MergeOptions | None = None,
) -> MergeResult:
    """
    Merge a template into the wrapped tool's settings.

    Non-destructive for the user's environment: existing ``env`` values are
    never overwritten, template-only keys are added. ``permissions.allow``
    and ``permissions.deny`` become the ordered union of both sides. All
    other keys follow ``options``.

    Args:
        base: Current native settings (user values).
        template: Settings to apply.
        options: Strategy for keys outside ``env``/permission lists.

    Returns:
        MergeResult; env overlaps are reported as conflicts with the user
        value chosen. ``ask`` reports every overlap, ``merge`` only differing values.
    """
    options = options or MergeOptions()

    base_env = base.get("env") if isinstance(base.get("env"), dict) else {}
    template_env = template.get("env") if isinstance(template.get("env"), dict) else {}
    base_permissions = base.get("permissions") if isinstance(base.get("permissions"), dict) else {}
    template_permissions = template.get("permissions") if isinstance(template.get("permissions"), dict) else {}

    # env and permissions are merged separately below
    rest_template = {k: v for k, v in template.items() if k not in ("env", "permissions")}
    outcome = merge(base, rest_template, options)
    result = outcome.result

    if "env" in base or "env" in template:
        env = copy.deepcopy(base_env)
        for key, value in template_env.items():
            if key not in env:
                env[key] = copy.deepcopy(value)
            elif options.strategy == MergeStrategy.ASK or (
                options.strategy == MergeStrategy.MERGE and env[key] != value
            ):
                outcome.conflicts.append(
                    MergeConflict(
                        path=f"env.{key}",
                        base_value=env[key],
                        source_value=value,
                        chosen_value=env[key],
                        strategy=options.strategy,
                    )
                )
        result["env"] = env

    if "permissions" in base or "permissions" in template:
        rest_permissions = {k: v for k, v in template_permissions.items() if k not in PERMISSION_LISTS}
        permissions = merge(base_permissions, rest_permissions, options).result
        for name in PERMISSION_LISTS:
            left = base_permissions.get(name) or []
            right = template_permissions.get(name) or []
            if name in base_permissions or name in template_permissions:
                permissions[name] = unique_union(left, right)
        result["permissions"] = permissions

    return outcome


def merge_preferences(
    base: dict[str, Any],
    template: dict[str, Any],
    options: MergeOptions | None = None,
) -> MergeResult:
    """
    Merge a template into preferences, keeping the user's language and tool.

    ``general.preferredLang`` and ``general.currentTool`` from ``base`` survive
    every strategy, including ``replace``.
    """
    outcome = merge(base, template, options)
    base_general = base.get("general") if isinstance(base.get("general"), dict) else {}
    general = outcome.result.get("general")

    for key in STICKY_PREFERENCES:
        if key not in base_general:
            continue
        if not isinstance(general, dict):
            general = {}
            outcome.result["general"] = general
        if general.get(key) != base_general[key]:
            outcome.warnings.append(
                f"Kept general.{key}={base_general[key]!r}; template value {general.get(key)!r} ignored"
            )
            general[key] = copy.deepcopy(base_general[key])
        for conflict in outcome.conflicts:
            if conflict.path == f"general.{key}":
                conflict.chosen_value = copy.deepcopy(base_general[key])

    return outcome
