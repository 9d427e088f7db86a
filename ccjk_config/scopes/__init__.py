# CCJK Config Scopes Module
# One manager per persisted configuration document

from ccjk_config.scopes.base import ConfigScope, ResetResult, ScopeManager
from ccjk_config.scopes.native_settings import NativeSettingsManager, PermissionRules, default_native_settings
from ccjk_config.scopes.preferences import GeneralPreferences, PreferencesManager, default_preferences
from ccjk_config.scopes.runtime_state import (
    CacheInfo,
    RuntimeStateManager,
    SessionRecord,
    UpdateStatus,
    default_runtime_state,
)

__all__ = [
    "ConfigScope",
    "ResetResult",
    "ScopeManager",
    # Preferences
    "GeneralPreferences",
    "PreferencesManager",
    "default_preferences",
    # Native settings
    "NativeSettingsManager",
    "PermissionRules",
    "default_native_settings",
    # Runtime state
    "CacheInfo",
    "RuntimeStateManager",
    "SessionRecord",
    "UpdateStatus",
    "default_runtime_state",
]
