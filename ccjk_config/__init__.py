"""CCJK Config - local configuration platform for the CCJK developer CLI.

Owns three independent, versioned configuration documents (preferences,
native tool settings and runtime state) with atomic persistence, schema
validation, merging, legacy migration and hot-reload.
"""

__version__ = "5.0.0"
__author__ = "CCJK Contributors"

__all__ = [
    "__version__",
    "ConfigScope",
    "ConfigContext",
    "UnifiedConfig",
    "PlatformSettings",
    "ConfigError",
    "enable_logging",
    "disable_logging",
]

APP_NAME = "ccjk_config"


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "ConfigScope":
        from ccjk_config.scopes.base import ConfigScope

        return ConfigScope
    if name == "ConfigContext":
        from ccjk_config.context import ConfigContext

        return ConfigContext
    if name == "UnifiedConfig":
        from ccjk_config.facade import UnifiedConfig

        return UnifiedConfig
    if name == "PlatformSettings":
        from ccjk_config.settings import PlatformSettings

        return PlatformSettings
    if name == "ConfigError":
        from ccjk_config.errors import ConfigError

        return ConfigError
    if name in ("enable_logging", "disable_logging"):
        from ccjk_config import logger

        return getattr(logger, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
