# CCJK Config Test Fixtures
# Pytest fixtures for CCJK Config tests

import json
import tempfile
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ccjk_config.context import ConfigContext
from ccjk_config.facade import UnifiedConfig

FIXED_NOW = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW; timestamps render as 2026-01-15T12:30:45.000Z."""
    return fixed_clock


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory with no CCJK_* overrides."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in ("CCJK_HOME", "CCJK_CLAUDE_DIR", "CCJK_USER_HOME", "CCJK_WATCH_BACKEND", "CCJK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def context(temp_home: Path) -> ConfigContext:
    """Context rooted at the temporary home with a fixed clock and fast polling watcher."""
    return ConfigContext.for_directory(
        temp_home,
        clock=fixed_clock,
        watch_backend="polling",
        poll_interval_ms=50,
        watch_debounce_ms=100,
        watch_restart_backoff_ms=100,
    )


@pytest.fixture
def config(context: ConfigContext) -> Generator[UnifiedConfig, None, None]:
    """Unified config over the temporary context; watchers are stopped afterwards."""
    unified = UnifiedConfig(context)
    yield unified
    unified.close()


@pytest.fixture
def v1_legacy(temp_home: Path) -> Path:
    """Legacy JSON config at ~/.claude/.zcf-config.json."""
    path = temp_home / ".claude" / ".zcf-config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"preferredLang": "zh-CN", "codeToolType": "codex"}), encoding="utf-8")
    return path


@pytest.fixture
def v2_legacy(temp_home: Path) -> Path:
    """Legacy TOML config at ~/.ufomiao/zcf/config.toml."""
    path = temp_home / ".ufomiao" / "zcf" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text(
        """version = "2.0.0"

[general]
preferredLang = "en"
currentTool = "claude-code"

[claudeCode]
enabled = true
installType = "local"
outputStyles = ["speed-coder"]
defaultOutputStyle = "speed-coder"

[codex]
enabled = false
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def claude_legacy(temp_home: Path) -> Path:
    """Legacy Claude settings at ~/.claude/config.json."""
    path = temp_home / ".claude" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "model": "opus",
                "env": {"ANTHROPIC_BASE_URL": "https://proxy.example.com", "MCP_TIMEOUT": 60000},
                "permissions": {"allow": ["Read(*)", "Bash(npm test:*)"]},
            }
        ),
        encoding="utf-8",
    )
    return path
