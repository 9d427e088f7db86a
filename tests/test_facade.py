# Tests for ccjk_config.facade
# Unified access across scopes, api/migration change events and collaborators

import time

import pytest

from ccjk_config.collaborators import CatalogTranslator, MemoryCredentialStore
from ccjk_config.errors import ConfigValidationError, SchemaPathError
from ccjk_config.facade import UnifiedConfig
from ccjk_config.merge import MergeOptions, MergeStrategy
from ccjk_config.migration import MigrationOptions
from ccjk_config.scopes import ConfigScope
from ccjk_config.watcher import ChangeSource


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestContext:
    """Tests for ConfigContext wiring."""

    def test_paths_under_home(self, context, temp_home):
        assert context.preferences_path == temp_home / ".ccjk" / "config.yaml"
        assert context.native_settings_path == temp_home / ".claude" / "settings.json"
        assert context.runtime_state_path == temp_home / ".ccjk" / "state.json"
        assert context.backup_root == temp_home / ".ccjk" / "backups"

    def test_manager_rejects_all(self, context):
        with pytest.raises(ValueError):
            context.manager(ConfigScope.ALL)
        with pytest.raises(ValueError):
            context.manager("global")

    def test_durations_in_seconds(self, context):
        assert context.debounce == pytest.approx(0.1)
        assert context.restart_backoff == pytest.approx(0.1)


class TestDocuments:
    """Tests for read/write/validate/get/set through the facade."""

    def test_read_all_when_nothing_exists(self, config):
        assert config.read("all") == {"preferences": None, "native-settings": None, "runtime-state": None}

    def test_validate_all(self, config):
        results = config.validate(ConfigScope.ALL)
        assert set(results) == {"preferences", "native-settings", "runtime-state"}
        assert all(result.valid for result in results.values())

    def test_set_then_get(self, config):
        config.set("native-settings", "env.MCP_TIMEOUT", 60000)
        assert config.get("native-settings", "env.MCP_TIMEOUT") == 60000
        assert config.read(ConfigScope.NATIVE_SETTINGS)["env"]["MCP_TIMEOUT"] == 60000

    def test_set_unknown_path(self, config):
        with pytest.raises(SchemaPathError):
            config.set("preferences", "general.colour", "red")

    def test_set_invalid_value_leaves_file_alone(self, config):
        config.set("preferences", "general.theme", "dark")
        before = config.preferences.path.read_bytes()
        with pytest.raises(ConfigValidationError):
            config.set("preferences", "general.preferredLang", "fr")
        assert config.preferences.path.read_bytes() == before

    def test_update(self, config):
        doc = config.update("preferences", {"general": {"theme": "light"}})
        assert doc["general"]["theme"] == "light"
        assert doc["general"]["preferredLang"] == "en"

    def test_apply_template_keeps_sticky_fields(self, config):
        config.preferences.set_language("zh-CN")
        template = {"general": {"preferredLang": "en", "theme": "dark"}}
        outcome = config.apply_template("preferences", template)

        assert outcome.result["general"]["preferredLang"] == "zh-CN"
        assert outcome.result["general"]["theme"] == "dark"
        assert any(c.path == "general.preferredLang" for c in outcome.conflicts)
        assert config.read("preferences") == outcome.result

    def test_apply_template_native_settings_preserve(self, config):
        config.write("native-settings", {"model": "opus", "permissions": {"allow": ["Bash(ls:*)"]}})
        template = {"model": "sonnet", "permissions": {"allow": ["Read(*)"]}}
        outcome = config.apply_template(
            ConfigScope.NATIVE_SETTINGS, template, MergeOptions(strategy=MergeStrategy.PRESERVE)
        )
        assert outcome.result["model"] == "opus"
        assert outcome.result["permissions"]["allow"] == ["Bash(ls:*)", "Read(*)"]


class TestMaintenance:
    """Tests for backup and reset."""

    def test_backup_all(self, config):
        config.set("native-settings", "model", "opus")
        paths = config.backup("all")
        assert paths["preferences"] is None
        assert paths["runtime-state"] is None
        assert paths["native-settings"].exists()

    def test_reset_one_scope(self, config):
        config.set("preferences", "general.theme", "dark")
        [result] = config.reset("preferences")
        assert result.scope == ConfigScope.PREFERENCES
        assert result.backup_path is not None and result.backup_path.exists()
        assert config.read("preferences")["general"]["theme"] == "auto"

    def test_reset_all_without_backup(self, config):
        results = config.reset(ConfigScope.ALL, backup=False)
        assert [r.scope for r in results] == list(ConfigScope.concrete())
        assert all(r.backup_path is None for r in results)
        assert all(value is not None for value in config.read("all").values())


class TestMigration:
    """Tests for migration through the facade."""

    def test_migrate(self, config, v1_legacy):
        assert config.needs_migration()
        result = config.migrate()
        assert result.success
        assert config.get("preferences", "general.preferredLang") == "zh-CN"
        assert not config.needs_migration()
        assert config.migration_status().versions["preferences"] == "5.0.0"

    def test_dry_run(self, config, v1_legacy):
        result = config.migrate(MigrationOptions(dry_run=True))
        assert result.migrated_scopes == ["preferences"]
        assert config.read("preferences") is None

    def test_watchers_receive_migration_events(self, config, v1_legacy):
        events = []
        config.watch("preferences", events.append)
        config.migrate()
        assert any(
            e.path == "general.preferredLang" and e.new_value == "zh-CN" and e.source == ChangeSource.MIGRATION
            for e in events
        )


class TestWatch:
    """Tests for change notification through the facade."""

    def test_api_write_emits_event_once(self, config):
        config.write("native-settings", {"model": "opus"})
        events = []
        config.watch("native-settings", events.append)
        config.set("native-settings", "env.MCP_TIMEOUT", 60000)

        assert [(e.path, e.new_value, e.source) for e in events] == [
            ("env.MCP_TIMEOUT", 60000, ChangeSource.API)
        ]
        assert events[0].timestamp == config.context.clock()
        time.sleep(0.5)
        assert len(events) == 1

    def test_external_edit_emits_file_event(self, config):
        config.write("native-settings", {"model": "opus"})
        events = []
        config.watch("native-settings", events.append)

        config.native_settings.write({"model": "sonnet"})

        assert wait_for(lambda: events)
        assert [(e.path, e.old_value, e.new_value, e.source) for e in events] == [
            ("model", "opus", "sonnet", ChangeSource.FILE)
        ]

    def test_unsubscribe_all_scopes(self, config):
        events = []
        unsubscribe = config.watch("all", events.append)
        unsubscribe()
        config.set("runtime-state", "cache.size", 10)
        assert events == []

    def test_reset_emits_api_events(self, config):
        config.set("preferences", "general.theme", "dark")
        events = []
        config.watch("preferences", events.append)
        config.reset("preferences", backup=False)
        assert any(e.path == "general.theme" and e.new_value == "auto" for e in events)

    def test_close_stops_watchers(self, context):
        with UnifiedConfig(context) as config:
            events = []
            config.watch("native-settings", events.append)
        config.native_settings.write({"model": "opus"})
        time.sleep(0.5)
        assert events == []


class TestCollaborators:
    """Tests for credential store and translator collaborators."""

    def test_default_collaborators(self, config):
        assert isinstance(config.credentials, MemoryCredentialStore)
        assert config.translator.t("reset.done", scope="preferences") == "preferences reset to defaults"

    def test_memory_credentials(self):
        store = MemoryCredentialStore({"anthropic.apiKey": "sk-ant-x"})
        store.set("openai.apiKey", "sk-o")
        assert store.has("anthropic.apiKey")
        assert store.list() == ["anthropic.apiKey", "openai.apiKey"]
        assert store.delete("openai.apiKey") is True
        assert store.delete("openai.apiKey") is False
        assert store.get("openai.apiKey") is None
        with pytest.raises(ValueError):
            store.set("", "value")

    def test_translator_fallbacks(self):
        zh = CatalogTranslator("zh-CN")
        assert zh.t("reset.done", scope="x") == "x 已重置为默认值"
        assert CatalogTranslator("fr").t("migration.none") == "No legacy configuration found"
        assert CatalogTranslator().t("unknown.key") == "unknown.key"
        assert CatalogTranslator().t("reset.done") == "{scope} reset to defaults"

    def test_custom_collaborators(self, context):
        store = MemoryCredentialStore()
        translator = CatalogTranslator("zh-CN")
        config = UnifiedConfig(context, credentials=store, translator=translator)
        assert config.credentials is store
        assert config.translator is translator
