# CCJK Config Native Settings Scope
# The wrapped tool's own settings.json (env, permissions, model, output style)

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ccjk_config.codecs import JSON
from ccjk_config.merge.engine import unique_union
from ccjk_config.schema.definitions import NATIVE_SETTINGS_SCHEMA
from ccjk_config.scopes.base import ConfigScope, ScopeManager

DEFAULT_ALLOW = [
    "Bash(git status:*)",
    "Bash(git diff:*)",
    "Bash(git log:*)",
    "Read(*)",
]


def default_native_settings(
    preferred_lang: str = "en",
    install_type: str = "global",
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the native settings CCJK writes for a fresh install.

    The document carries no version stamp; it belongs to the wrapped tool.
    """
    return {
        "env": {},
        "permissions": {
            "allow": list(DEFAULT_ALLOW),
            "deny": [],
        },
    }


class PermissionRules(BaseModel):
    """Typed view of the ``permissions`` section."""

    allow: list[str] = Field(default_factory=list, description="Allowed tool patterns")
    deny: list[str] = Field(default_factory=list, description="Denied tool patterns")


class NativeSettingsManager(ScopeManager):
    """Manages ``<claude_dir>/settings.json``."""

    scope = ConfigScope.NATIVE_SETTINGS
    schema = NATIVE_SETTINGS_SCHEMA
    codec = JSON
    sections = ("env", "permissions")

    def defaults(self) -> dict[str, Any]:
        return default_native_settings(self.preferred_lang, self.install_type, self.clock())

    def env(self) -> dict[str, Any]:
        return dict(self.get_or_default().get("env") or {})

    def set_env(self, key: str, value: Any) -> dict[str, Any]:
        return self.update({"env": {key: value}})

    def remove_env(self, key: str) -> dict[str, Any]:
        doc = self.get_or_default()
        env = dict(doc.get("env") or {})
        env.pop(key, None)
        doc["env"] = env
        return self.write(doc)

    def permissions(self) -> PermissionRules:
        return PermissionRules.model_validate(self.get_or_default().get("permissions") or {})

    def allow(self, *patterns: str) -> dict[str, Any]:
        """Add patterns to ``permissions.allow``, keeping order and skipping duplicates."""
        current = self.permissions()
        return self.update({"permissions": {"allow": unique_union(current.allow, list(patterns))}})
