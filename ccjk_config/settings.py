# CCJK Config Platform Settings
# Environment-driven settings (CCJK_*) for locating config files and tuning the watcher

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatformSettings(BaseSettings):
    """
    Process-level settings for the configuration platform.

    Every field can be overridden with a ``CCJK_`` prefixed environment
    variable, e.g. ``CCJK_HOME=/tmp/ccjk`` or ``CCJK_WATCH_BACKEND=polling``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CCJK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    user_home: Path = Field(default_factory=Path.home, description="User home directory used for legacy lookups")
    home: Path | None = Field(default=None, description="CCJK config directory (default ~/.ccjk)")
    claude_dir: Path | None = Field(default=None, description="Claude Code settings directory (default ~/.claude)")
    watch_debounce_ms: int = Field(default=300, ge=0, description="Hot-reload debounce delay")
    watch_backend: Literal["auto", "native", "polling"] = Field(default="auto", description="File watch backend")
    poll_interval_ms: int = Field(default=500, gt=0, description="Polling backend interval")
    watch_restart_backoff_ms: int = Field(default=1000, ge=0, description="Delay before restarting a failed watch")
    log_level: str = Field(default="WARNING", description="Diagnostic log level for the CLI")

    @field_validator("user_home", "home", "claude_dir")
    @classmethod
    def expand_path(cls, v: Path | None) -> Path | None:
        """Expand ~ in paths."""
        return Path(v).expanduser() if v is not None else None

    @property
    def config_dir(self) -> Path:
        return self.home or self.user_home / ".ccjk"

    @property
    def claude_config_dir(self) -> Path:
        return self.claude_dir or self.user_home / ".claude"
