# CCJK Config Runtime State Scope
# Session, cache and update-check tracking stored as JSON

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ccjk_config import __version__
from ccjk_config.codecs import JSON
from ccjk_config.schema.definitions import RUNTIME_STATE_SCHEMA, RUNTIME_STATE_VERSION
from ccjk_config.scopes.base import ConfigScope, ScopeManager
from ccjk_config.utils.clock import iso_timestamp
from ccjk_config.utils.versioning import compare_versions

# Seven days
DEFAULT_CACHE_MAX_AGE_MS = 7 * 24 * 60 * 60 * 1000


def default_runtime_state(
    preferred_lang: str = "en",
    install_type: str = "global",
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build an empty runtime state document."""
    return {
        "version": RUNTIME_STATE_VERSION,
        "lastUpdated": iso_timestamp(now),
        "sessions": [],
        "cache": {
            "lastCleanup": None,
            "size": 0,
            "maxAge": DEFAULT_CACHE_MAX_AGE_MS,
        },
        "updates": {
            "lastCheck": None,
            "lastVersion": None,
            "currentVersion": __version__,
            "updateAvailable": False,
        },
    }


class SessionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    started_at: str = Field(alias="startedAt")
    tool: Optional[str] = None
    cwd: Optional[str] = None
    ended_at: Optional[str] = Field(default=None, alias="endedAt")

    @property
    def active(self) -> bool:
        return self.ended_at is None


class CacheInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_cleanup: Optional[str] = Field(default=None, alias="lastCleanup")
    size: float = 0
    max_age: float = Field(default=DEFAULT_CACHE_MAX_AGE_MS, alias="maxAge")


class UpdateStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_check: Optional[str] = Field(default=None, alias="lastCheck")
    last_version: Optional[str] = Field(default=None, alias="lastVersion")
    current_version: str = Field(default=__version__, alias="currentVersion")
    update_available: bool = Field(default=False, alias="updateAvailable")


class RuntimeStateManager(ScopeManager):
    """Manages ``<ccjk_home>/state.json``."""

    scope = ConfigScope.RUNTIME_STATE
    schema = RUNTIME_STATE_SCHEMA
    codec = JSON
    current_version = RUNTIME_STATE_VERSION
    sections = ("cache", "updates")

    def defaults(self) -> dict[str, Any]:
        return default_runtime_state(self.preferred_lang, self.install_type, self.clock())

    def sessions(self) -> list[SessionRecord]:
        return [SessionRecord.model_validate(s) for s in self.get_or_default().get("sessions") or []]

    def add_session(self, session_id: str, tool: str | None = None, cwd: str | None = None) -> SessionRecord:
        """
        Record a new session; an existing record with the same id is replaced.

        Returns:
            The stored session.
        """
        record = SessionRecord(id=session_id, started_at=iso_timestamp(self.clock()), tool=tool, cwd=cwd)
        doc = self.get_or_default()
        sessions = [s for s in doc.get("sessions") or [] if s.get("id") != session_id]
        sessions.append(record.model_dump(by_alias=True, exclude_none=True))
        doc["sessions"] = sessions
        self.write(doc)
        return record

    def end_session(self, session_id: str) -> bool:
        """Mark a session as ended. Returns False if it is unknown."""
        doc = self.get_or_default()
        for session in doc.get("sessions") or []:
            if session.get("id") == session_id:
                session["endedAt"] = iso_timestamp(self.clock())
                self.write(doc)
                return True
        return False

    def cache(self) -> CacheInfo:
        return CacheInfo.model_validate(self.get_or_default().get("cache") or {})

    def record_cleanup(self, size: float = 0) -> dict[str, Any]:
        return self.update({"cache": {"lastCleanup": iso_timestamp(self.clock()), "size": size}})

    def updates(self) -> UpdateStatus:
        return UpdateStatus.model_validate(self.get_or_default().get("updates") or {})

    def record_update_check(self, latest_version: str) -> UpdateStatus:
        """Store the result of an update check against the running version."""
        current = self.updates().current_version
        self.update(
            {
                "updates": {
                    "lastCheck": iso_timestamp(self.clock()),
                    "lastVersion": latest_version,
                    "updateAvailable": compare_versions(latest_version, current) > 0,
                }
            }
        )
        return self.updates()
