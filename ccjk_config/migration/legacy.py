# CCJK Config Legacy Detection
# Side-effect-free probing and classification of pre-current config files

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from ccjk_config.codecs import DecodeError, codec_for_suffix
from ccjk_config.errors import StoreError
from ccjk_config.logger import create_logger
from ccjk_config.scopes.base import ConfigScope
from ccjk_config.store import AtomicFileStore

log = create_logger("migration")

NATIVE_SETTINGS_MARKERS = ("env", "permissions", "model", "outputStyle")


class LegacyType(str, Enum):
    """Known legacy configuration formats."""

    V1_JSON = "v1-json"
    V2_TOML = "v2-toml"
    UNIFIED = "unified"
    CLAUDE_SETTINGS = "claude-settings"


@dataclass
class LegacyConfigInfo:
    """A detected legacy source."""

    type: LegacyType
    path: Path
    version: str
    target_scope: ConfigScope
    data: dict[str, Any]


def legacy_paths(config_dir: Path, claude_dir: Path, user_home: Path) -> list[Path]:
    """Fixed search order, newest format first."""
    return [
        config_dir / "config.toml",
        user_home / ".ufomiao" / "zcf" / "config.toml",
        claude_dir / ".zcf-config.json",
        user_home / ".zcf.json",
        claude_dir / "config.json",
    ]


def classify(path: Path, data: dict[str, Any]) -> LegacyConfigInfo | None:
    """
    Classify a parsed file by its distinguishing markers.

    Returns:
        LegacyConfigInfo, or None if the content matches no known format.
    """
    version = data.get("version")
    version = str(version) if version is not None else None

    if path.suffix == ".toml":
        if version and version.startswith("4."):
            return LegacyConfigInfo(LegacyType.UNIFIED, path, version, ConfigScope.PREFERENCES, data)
        if "general" in data or "claudeCode" in data:
            return LegacyConfigInfo(LegacyType.V2_TOML, path, version or "2.x", ConfigScope.PREFERENCES, data)
        return None

    if "preferredLang" in data or "codeToolType" in data:
        return LegacyConfigInfo(LegacyType.V1_JSON, path, version or "1.x", ConfigScope.PREFERENCES, data)
    if any(key in data for key in NATIVE_SETTINGS_MARKERS):
        return LegacyConfigInfo(
            LegacyType.CLAUDE_SETTINGS, path, version or "legacy", ConfigScope.NATIVE_SETTINGS, data
        )
    return None


def detect_legacy(paths: list[Path], store: AtomicFileStore | None = None) -> list[LegacyConfigInfo]:
    """
    Check ``paths`` in order and classify each existing file.

    Unreadable, corrupt or unrecognized files are skipped.
    """
    store = store or AtomicFileStore()
    found: list[LegacyConfigInfo] = []
    for path in paths:
        try:
            raw = store.read(path)
        except StoreError as e:
            log.warning("Skipping unreadable legacy config {}: {}", path, e.cause)
            continue
        if raw is None:
            continue
        try:
            data = codec_for_suffix(path.suffix).decode(raw)
        except DecodeError as e:
            log.warning("Skipping corrupt legacy config {}: {}", path, e)
            continue
        info = classify(path, data)
        if info is None:
            log.debug("Ignoring unrecognized file {}", path)
            continue
        log.debug("Detected {} config at {}", info.type.value, path)
        found.append(info)
    return found
