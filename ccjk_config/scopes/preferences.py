# CCJK Config Preferences Scope
# Tool-agnostic user preferences stored as YAML in the CCJK config directory

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ccjk_config.codecs import YAML
from ccjk_config.schema.definitions import (
    PREFERENCES_SCHEMA,
    PREFERENCES_VERSION,
    SUPPORTED_LANGS,
    SUPPORTED_TOOLS,
)
from ccjk_config.schema.validator import ValidationResult, ValidationWarning
from ccjk_config.scopes.base import ConfigScope, ScopeManager
from ccjk_config.utils.clock import iso_timestamp

DEFAULT_TOOL = "claude-code"
DEFAULT_OUTPUT_STYLES = ["speed-coder", "senior-architect", "pair-programmer"]
DEFAULT_OUTPUT_STYLE = "senior-architect"
DEFAULT_SYSTEM_PROMPT_STYLE = "senior-architect"
DEFAULT_ANTHROPIC_BASE_URL = "https://api.anthropic.com"


def default_preferences(
    preferred_lang: str = "en",
    install_type: str = "global",
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build a complete preferences document.

    Args:
        preferred_lang: UI/template language (``zh-CN`` or ``en``).
        install_type: Claude Code install mode (``global`` or ``local``).
        now: Timestamp for ``lastUpdated``.

    Returns:
        A document that passes PREFERENCES_SCHEMA.
    """
    return {
        "version": PREFERENCES_VERSION,
        "lastUpdated": iso_timestamp(now),
        "general": {
            "preferredLang": preferred_lang,
            "templateLang": preferred_lang,
            "aiOutputLang": preferred_lang,
            "currentTool": DEFAULT_TOOL,
            "theme": "auto",
        },
        "tools": {
            "claudeCode": {
                "enabled": True,
                "installType": install_type,
                "outputStyles": list(DEFAULT_OUTPUT_STYLES),
                "defaultOutputStyle": DEFAULT_OUTPUT_STYLE,
                "currentProfile": "",
                "profiles": {},
            },
            "codex": {
                "enabled": False,
                "systemPromptStyle": DEFAULT_SYSTEM_PROMPT_STYLE,
            },
        },
        "api": {
            "anthropic": {
                "baseUrl": DEFAULT_ANTHROPIC_BASE_URL,
                "timeout": 30000,
                "retries": 3,
            },
        },
        "features": {
            "hotReload": True,
            "autoMigration": True,
            "telemetry": False,
            "experimentalFeatures": [],
        },
    }


class GeneralPreferences(BaseModel):
    """Typed view of the ``general`` section."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    preferred_lang: str = Field(alias="preferredLang", description="UI language")
    template_lang: str | None = Field(default=None, alias="templateLang", description="Template language")
    ai_output_lang: str | None = Field(default=None, alias="aiOutputLang", description="AI response language")
    current_tool: str = Field(default=DEFAULT_TOOL, alias="currentTool", description="Active code tool")
    theme: str | None = Field(default=None, description="Color theme")

    @field_validator("preferred_lang")
    @classmethod
    def check_lang(cls, v: str) -> str:
        if v not in SUPPORTED_LANGS:
            raise ValueError(f"Unsupported language: {v}")
        return v

    @field_validator("current_tool")
    @classmethod
    def check_tool(cls, v: str) -> str:
        if v not in SUPPORTED_TOOLS:
            raise ValueError(f"Unsupported tool: {v}")
        return v


class PreferencesManager(ScopeManager):
    """Manages ``<ccjk_home>/config.yaml``."""

    scope = ConfigScope.PREFERENCES
    schema = PREFERENCES_SCHEMA
    codec = YAML
    current_version = PREFERENCES_VERSION
    sections = ("general", "tools.claudeCode", "tools.codex", "api", "features")

    def defaults(self) -> dict[str, Any]:
        return default_preferences(self.preferred_lang, self.install_type, self.clock())

    def validate(self, doc: dict[str, Any] | None = None) -> ValidationResult:
        result = super().validate(doc)
        document = doc if doc is not None else self.get_or_default()
        claude_code = (document.get("tools") or {}).get("claudeCode") or {}
        styles = claude_code.get("outputStyles")
        default_style = claude_code.get("defaultOutputStyle")
        if isinstance(styles, list) and styles and default_style and default_style not in styles:
            result.warnings.append(
                ValidationWarning(
                    path="tools.claudeCode.defaultOutputStyle",
                    message=f"Default output style '{default_style}' is not in outputStyles",
                    suggestion=f"Use one of: {', '.join(map(str, styles))}",
                )
            )
        return result

    def general(self) -> GeneralPreferences:
        return GeneralPreferences.model_validate(self.get_or_default().get("general") or {})

    def set_language(self, lang: str) -> dict[str, Any]:
        """Set preferred and template language together."""
        return self.update({"general": {"preferredLang": lang, "templateLang": lang}})

    def set_current_tool(self, tool: str) -> dict[str, Any]:
        partial: dict[str, Any] = {"general": {"currentTool": tool}}
        if tool == "codex":
            partial["tools"] = {"codex": {"enabled": True}}
        return self.update(partial)
