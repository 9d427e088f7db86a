# CCJK Config Collaborators
# Interfaces consumed by the platform: credential storage and message translation

from __future__ import annotations

import threading
from typing import Any, Mapping, Protocol


class CredentialStore(Protocol):
    """
    Secret storage keyed by logical name (e.g. ``anthropic.apiKey``).

    Values never appear in scope files; implementations decide where and
    how they are kept.
    """

    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...

    def has(self, name: str) -> bool: ...

    def list(self) -> list[str]: ...

    def delete(self, name: str) -> bool: ...


class MemoryCredentialStore:
    """Process-local credential store for tests and ephemeral sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, name: str) -> str | None:
        with self._lock:
            return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        if not name:
            raise ValueError("Credential name must not be empty")
        with self._lock:
            self._values[name] = value

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._values

    def list(self) -> list[str]:
        with self._lock:
            return sorted(self._values)

    def delete(self, name: str) -> bool:
        with self._lock:
            return self._values.pop(name, None) is not None


class Translator(Protocol):
    def t(self, key: str, **params: Any) -> str: ...


# Messages used by the command line presentation
CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "validation.ok": "{scope} is valid",
        "validation.failed": "{scope} has {count} error(s)",
        "migration.none": "No legacy configuration found",
        "migration.done": "Migrated: {scopes}",
        "migration.backup": "Backup created at {path}",
        "reset.done": "{scope} reset to defaults",
        "backup.none": "Nothing to back up for {scope}",
        "backup.done": "{scope} backed up to {path}",
        "watch.started": "Watching {path} (Ctrl+C to stop)",
    },
    "zh-CN": {
        "validation.ok": "{scope} 配置有效",
        "validation.failed": "{scope} 存在 {count} 个错误",
        "migration.none": "未发现旧版配置",
        "migration.done": "已迁移: {scopes}",
        "migration.backup": "备份已创建: {path}",
        "reset.done": "{scope} 已重置为默认值",
        "backup.none": "{scope} 没有需要备份的内容",
        "backup.done": "{scope} 已备份到 {path}",
        "watch.started": "正在监听 {path} (Ctrl+C 退出)",
    },
}


class CatalogTranslator:
    """Looks messages up in a catalog, falling back to English and then to the key."""

    def __init__(self, lang: str = "en", catalog: Mapping[str, Mapping[str, str]] | None = None):
        self.lang = lang
        self.catalog = catalog or CATALOG

    def t(self, key: str, **params: Any) -> str:
        template = self.catalog.get(self.lang, {}).get(key) or self.catalog.get("en", {}).get(key) or key
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            return template
