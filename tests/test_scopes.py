# Tests for ccjk_config.scopes
# Scope manager lifecycle: read, write, update, typed access, reset and recovery

import json

import pytest

from ccjk_config.errors import ConfigParseError, ConfigValidationError, ConfigVersionError, SchemaPathError
from ccjk_config.schema.validator import ValidationErrorCode
from ccjk_config.scopes import (
    ConfigScope,
    NativeSettingsManager,
    PreferencesManager,
    RuntimeStateManager,
)
from ccjk_config.scopes.runtime_state import DEFAULT_CACHE_MAX_AGE_MS

STAMP = "2026-01-15T12:30:45.000Z"


@pytest.fixture
def preferences(temp_dir, clock):
    return PreferencesManager(temp_dir / "ccjk" / "config.yaml", clock=clock)


@pytest.fixture
def native(temp_dir, clock):
    return NativeSettingsManager(temp_dir / "claude" / "settings.json", clock=clock)


@pytest.fixture
def runtime(temp_dir, clock):
    return RuntimeStateManager(temp_dir / "ccjk" / "state.json", clock=clock)


class TestConfigScope:
    """Tests for the ConfigScope enum."""

    def test_values(self):
        assert ConfigScope("native-settings") is ConfigScope.NATIVE_SETTINGS
        assert ConfigScope.ALL not in ConfigScope.concrete()
        assert len(ConfigScope.concrete()) == 3


class TestReadWrite:
    """Tests for read/write round trips."""

    def test_read_missing_is_none(self, preferences):
        assert preferences.read() is None
        assert not preferences.exists()

    def test_get_or_default_never_none(self, preferences):
        doc = preferences.get_or_default()
        assert doc["version"] == "5.0.0"
        assert doc["general"]["preferredLang"] == "en"

    def test_native_settings_round_trip_is_identical(self, native):
        doc = {"model": "sonnet", "env": {"ANTHROPIC_API_KEY": "sk-ant-REDACTED"}}
        native.write(doc)
        assert native.read() == doc
        assert json.loads(native.path.read_text(encoding="utf-8")) == doc

    def test_preferences_round_trip_except_last_updated(self, preferences):
        doc = preferences.defaults()
        doc["lastUpdated"] = "2020-01-01T00:00:00.000Z"
        doc["general"]["theme"] = "dark"
        written = preferences.write(doc)
        read = preferences.read()
        assert read == written
        assert read["lastUpdated"] == STAMP
        read.pop("lastUpdated")
        doc.pop("lastUpdated")
        assert read == doc

    def test_write_stamps_version_when_missing(self, runtime):
        doc = runtime.defaults()
        del doc["version"]
        assert runtime.write(doc)["version"] == "1.0.0"

    def test_native_settings_not_stamped(self, native):
        written = native.write({"env": {}})
        assert "lastUpdated" not in written
        assert "version" not in written

    def test_preferences_stored_as_yaml(self, preferences):
        preferences.write(preferences.defaults())
        text = preferences.path.read_text(encoding="utf-8")
        assert text.startswith("version: 5.0.0")

    def test_invalid_document_not_persisted(self, preferences):
        doc = preferences.defaults()
        del doc["general"]["preferredLang"]
        with pytest.raises(ConfigValidationError) as exc_info:
            preferences.write(doc)
        assert exc_info.value.result.has_error("general.preferredLang", ValidationErrorCode.REQUIRED_FIELD)
        assert not preferences.path.exists()

    def test_version_cannot_go_backwards(self, runtime):
        doc = runtime.defaults()
        doc["version"] = "1.2.0"
        runtime.write(doc)
        doc["version"] = "1.1.0"
        with pytest.raises(ConfigVersionError):
            runtime.write(doc)
        assert runtime.read()["version"] == "1.2.0"

    def test_parse_error_keeps_last_known_good(self, native):
        native.write({"model": "opus"})
        assert native.read() == {"model": "opus"}
        native.path.write_text("{broken", encoding="utf-8")

        with pytest.raises(ConfigParseError):
            native.read()
        assert native.last_known_good == {"model": "opus"}
        assert native.get_or_default() == {"model": "opus"}

    def test_parse_error_without_history_falls_back_to_defaults(self, native):
        native.path.parent.mkdir(parents=True)
        native.path.write_text("{broken", encoding="utf-8")
        assert native.get_or_default() == native.defaults()


class TestUpdate:
    """Tests for section-wise update."""

    def test_sections_merge_independently(self, preferences):
        preferences.write(preferences.defaults())
        updated = preferences.update({"general": {"theme": "dark"}, "tools": {"codex": {"model": "o3"}}})
        assert updated["general"]["theme"] == "dark"
        assert updated["general"]["preferredLang"] == "en"
        assert updated["tools"]["codex"] == {
            "enabled": False,
            "systemPromptStyle": "senior-architect",
            "model": "o3",
        }
        assert updated["tools"]["claudeCode"]["enabled"] is True

    def test_update_without_file_starts_from_defaults(self, native):
        updated = native.update({"env": {"MCP_TIMEOUT": 60000}})
        assert updated["env"] == {"MCP_TIMEOUT": 60000}
        assert "Read(*)" in updated["permissions"]["allow"]

    def test_non_section_keys_replaced(self, native):
        native.write({"model": "opus", "env": {}})
        assert native.update({"model": "sonnet"})["model"] == "sonnet"


class TestTypedAccess:
    """Tests for get/set by dotted path."""

    def test_get(self, preferences):
        assert preferences.get("general.currentTool") == "claude-code"

    def test_get_unknown_path(self, preferences):
        with pytest.raises(SchemaPathError):
            preferences.get("general.colour")

    def test_set_persists(self, native):
        native.set("env.MCP_TIMEOUT", 60000)
        assert native.read()["env"]["MCP_TIMEOUT"] == 60000

    def test_set_invalid_value(self, native):
        with pytest.raises(ConfigValidationError):
            native.set("env.MCP_TIMEOUT", "not-a-number")
        assert not native.exists()

    def test_set_env_keeps_string_timeout(self, native):
        native.path.parent.mkdir(parents=True)
        native.path.write_text(json.dumps({"env": {"MCP_TIMEOUT": "60000"}}), encoding="utf-8")
        updated = native.set_env("ANTHROPIC_MODEL", "opus")
        assert updated["env"] == {"MCP_TIMEOUT": "60000", "ANTHROPIC_MODEL": "opus"}
        assert native.read()["env"]["ANTHROPIC_MODEL"] == "opus"


class TestBackupReset:
    """Tests for backup and reset."""

    def test_backup_missing(self, preferences):
        assert preferences.backup() is None

    def test_reset_backs_up_first(self, native):
        native.write({"model": "opus"})
        result = native.reset()
        assert result.backup_path is not None
        assert json.loads(result.backup_path.read_text(encoding="utf-8")) == {"model": "opus"}
        assert native.read() == native.defaults()

    def test_reset_without_backup(self, native):
        native.write({"model": "opus"})
        assert native.reset(backup=False).backup_path is None

    def test_reset_allows_lower_default_version(self, runtime):
        doc = runtime.defaults()
        doc["version"] = "2.0.0"
        runtime.write(doc)
        assert runtime.reset().document["version"] == "1.0.0"

    def test_snapshot_restore(self, native):
        assert native.snapshot() is None
        native.write({"model": "opus"})
        snapshot = native.snapshot()
        native.write({"model": "sonnet"})
        native.restore(snapshot)
        assert native.read() == {"model": "opus"}
        native.restore(None)
        assert not native.exists()


class TestPreferencesManager:
    """Tests for preferences helpers."""

    def test_defaults_follow_language(self, temp_dir):
        manager = PreferencesManager(temp_dir / "config.yaml", preferred_lang="zh-CN", install_type="local")
        doc = manager.defaults()
        assert doc["general"]["templateLang"] == "zh-CN"
        assert doc["tools"]["claudeCode"]["installType"] == "local"

    def test_set_language(self, preferences):
        preferences.set_language("zh-CN")
        general = preferences.general()
        assert general.preferred_lang == "zh-CN"
        assert general.template_lang == "zh-CN"

    def test_set_current_tool_codex_enables_codex(self, preferences):
        doc = preferences.set_current_tool("codex")
        assert doc["general"]["currentTool"] == "codex"
        assert doc["tools"]["codex"]["enabled"] is True

    def test_unknown_default_output_style_warns(self, preferences):
        doc = preferences.defaults()
        doc["tools"]["claudeCode"]["defaultOutputStyle"] = "poet"
        result = preferences.validate(doc)
        assert result.valid
        assert any(w.path == "tools.claudeCode.defaultOutputStyle" for w in result.warnings)

    def test_has_current_document(self, preferences):
        assert not preferences.has_current_document()
        preferences.write(preferences.defaults())
        assert preferences.has_current_document()


class TestNativeSettingsManager:
    """Tests for native settings helpers."""

    def test_env_helpers(self, native):
        native.set_env("ANTHROPIC_MODEL", "opus")
        assert native.env() == {"ANTHROPIC_MODEL": "opus"}
        native.remove_env("ANTHROPIC_MODEL")
        assert native.env() == {}

    def test_allow_skips_duplicates(self, native):
        native.allow("Read(*)", "Bash(npm test:*)")
        allow = native.permissions().allow
        assert allow.count("Read(*)") == 1
        assert allow[-1] == "Bash(npm test:*)"


class TestRuntimeStateManager:
    """Tests for runtime state helpers."""

    def test_defaults(self, runtime):
        assert runtime.cache().max_age == DEFAULT_CACHE_MAX_AGE_MS

    def test_sessions(self, runtime):
        runtime.add_session("s1", tool="claude-code", cwd="/work")
        runtime.add_session("s2")
        assert [s.id for s in runtime.sessions()] == ["s1", "s2"]
        assert runtime.end_session("s1") is True
        assert runtime.end_session("missing") is False
        ended = runtime.sessions()[0]
        assert not ended.active
        assert ended.ended_at == STAMP

    def test_record_cleanup(self, runtime):
        runtime.record_cleanup(size=42)
        cache = runtime.cache()
        assert cache.size == 42
        assert cache.last_cleanup == STAMP

    def test_record_update_check(self, runtime):
        status = runtime.record_update_check("99.0.0")
        assert status.update_available is True
        assert status.last_version == "99.0.0"
        assert runtime.record_update_check("0.0.1").update_available is False
