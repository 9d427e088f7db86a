# Tests for ccjk_config.cli
# CLI commands using Click testing

import json

import pytest
from click.testing import CliRunner
from loguru import logger

from ccjk_config.cli import cli, parse_value
from ccjk_config.logger import disable_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI installs a stderr handler; drop it so later tests stay quiet."""
    yield
    logger.remove()
    disable_logging()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, temp_home):
    def run(*args, input=None):
        return runner.invoke(cli, ["--no-color", *args], input=input)

    return run


class TestParseValue:
    """Tests for parse_value()."""

    def test_types(self):
        assert parse_value("60000") == 60000
        assert parse_value("true") is True
        assert parse_value("[a, b]") == ["a", "b"]
        assert parse_value("dark") == "dark"

    def test_invalid_yaml_stays_string(self):
        assert parse_value("[unclosed") == "[unclosed"


class TestCliGroup:
    """Tests for main CLI group."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "CCJK Config" in result.output
        assert "native-settings" in result.output
        assert "migrate" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "ccjk-config" in result.output
        assert "5.0.0" in result.output

    def test_unknown_scope(self, invoke):
        result = invoke("show", "global")
        assert result.exit_code == 2

    def test_unreadable_preferences_exit_cleanly(self, invoke, temp_home):
        (temp_home / ".ccjk" / "config.yaml").mkdir(parents=True)
        result = invoke("show")
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "Traceback" not in result.output


class TestShowCommand:
    """Tests for show command."""

    def test_nothing_configured(self, invoke):
        result = invoke("show")
        assert result.exit_code == 0
        assert result.output.count("not configured") == 3

    def test_show_scope(self, invoke):
        invoke("set", "preferences", "general.theme", "dark")
        result = invoke("show", "preferences")
        assert result.exit_code == 0
        assert "theme: dark" in result.output
        assert "native-settings" not in result.output

    def test_home_option(self, invoke, temp_dir):
        custom = temp_dir / "custom-ccjk"
        result = invoke("--home", str(custom), "set", "preferences", "general.theme", "light")
        assert result.exit_code == 0
        assert (custom / "config.yaml").exists()


class TestGetSetCommands:
    """Tests for get and set commands."""

    def test_set_keeps_type(self, invoke, temp_home):
        result = invoke("set", "native-settings", "env.MCP_TIMEOUT", "60000")
        assert result.exit_code == 0
        assert "env.MCP_TIMEOUT = 60000" in result.output
        data = json.loads((temp_home / ".claude" / "settings.json").read_text(encoding="utf-8"))
        assert data["env"]["MCP_TIMEOUT"] == 60000

    def test_set_string_flag(self, invoke, temp_home):
        result = invoke("set", "native-settings", "model", "123", "--string")
        assert result.exit_code == 0
        data = json.loads((temp_home / ".claude" / "settings.json").read_text(encoding="utf-8"))
        assert data["model"] == "123"

    def test_get_default(self, invoke):
        result = invoke("get", "preferences", "general.preferredLang")
        assert result.exit_code == 0
        assert "general.preferredLang = 'en'" in result.output

    def test_get_unknown_path(self, invoke):
        result = invoke("get", "preferences", "general.colour")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_set_invalid_value(self, invoke, temp_home):
        result = invoke("set", "native-settings", "env.MCP_TIMEOUT", "5")
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not (temp_home / ".claude" / "settings.json").exists()

    def test_get_rejects_all(self, invoke):
        result = invoke("get", "all", "general")
        assert result.exit_code == 2


class TestValidateCommand:
    """Tests for validate command."""

    def test_defaults_are_valid(self, invoke):
        result = invoke("validate")
        assert result.exit_code == 0
        assert result.output.count("is valid") == 3

    def test_invalid_file(self, invoke, temp_home):
        path = temp_home / ".claude" / "settings.json"
        path.parent.mkdir()
        path.write_text(json.dumps({"env": {"MCP_TIMEOUT": 5}}), encoding="utf-8")
        result = invoke("validate", "native-settings")
        assert result.exit_code == 1
        assert "native-settings has 1 error(s)" in result.output


class TestMigrateCommand:
    """Tests for migrate command."""

    def test_nothing_to_migrate(self, invoke):
        result = invoke("migrate")
        assert result.exit_code == 0
        assert "No legacy configuration found" in result.output

    def test_status(self, invoke, v1_legacy):
        result = invoke("migrate", "--status")
        assert result.exit_code == 0
        assert "needed" in result.output

    def test_dry_run(self, invoke, v1_legacy, temp_home):
        result = invoke("migrate", "--dry-run")
        assert result.exit_code == 0
        assert "Dry run completed" in result.output
        assert not (temp_home / ".ccjk" / "config.yaml").exists()

    def test_migrate(self, invoke, v1_legacy, temp_home):
        result = invoke("migrate")
        assert result.exit_code == 0
        assert "Migration completed" in result.output
        assert (temp_home / ".ccjk" / "config.yaml").exists()
        assert (temp_home / ".ccjk" / "backups").is_dir()

    def test_no_backup(self, invoke, v1_legacy, temp_home):
        result = invoke("migrate", "--no-backup")
        assert result.exit_code == 0
        assert not (temp_home / ".ccjk" / "backups").exists()

    def test_messages_follow_migrated_language(self, invoke, v1_legacy):
        invoke("migrate")
        result = invoke("migrate")
        assert "未发现旧版配置" in result.output


class TestBackupResetCommands:
    """Tests for backup and reset commands."""

    def test_backup_nothing(self, invoke):
        result = invoke("backup", "preferences")
        assert result.exit_code == 0
        assert "Nothing to back up for preferences" in result.output

    def test_backup(self, invoke, temp_home):
        invoke("set", "native-settings", "model", "opus")
        result = invoke("backup", "native-settings")
        assert result.exit_code == 0
        assert "native-settings backed up to" in result.output
        backups = list((temp_home / ".claude").glob("settings.json.*"))
        assert len(backups) == 1

    def test_reset_with_yes(self, invoke, temp_home):
        invoke("set", "native-settings", "model", "opus")
        result = invoke("reset", "native-settings", "--yes")
        assert result.exit_code == 0
        assert "native-settings reset to defaults" in result.output
        data = json.loads((temp_home / ".claude" / "settings.json").read_text(encoding="utf-8"))
        assert "model" not in data

    def test_reset_cancelled(self, invoke, temp_home):
        invoke("set", "native-settings", "model", "opus")
        result = invoke("reset", "native-settings", input="n\n")
        assert result.exit_code == 0
        assert "Reset cancelled" in result.output
        data = json.loads((temp_home / ".claude" / "settings.json").read_text(encoding="utf-8"))
        assert data["model"] == "opus"

    def test_lang_option(self, invoke):
        result = invoke("--lang", "zh-CN", "reset", "runtime-state", "--yes", "--no-backup")
        assert result.exit_code == 0
        assert "runtime-state 已重置为默认值" in result.output
