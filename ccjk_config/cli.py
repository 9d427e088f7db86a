"""Click-based CLI for CCJK Config - inspect, edit, migrate and watch local configuration."""

from __future__ import annotations

import functools
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import click
import yaml
from rich.prompt import Confirm

from ccjk_config import __version__
from ccjk_config.collaborators import CatalogTranslator
from ccjk_config.context import ConfigContext
from ccjk_config.errors import ConfigError
from ccjk_config.facade import UnifiedConfig
from ccjk_config.logger import setup_cli_logging
from ccjk_config.migration.engine import MigrationOptions
from ccjk_config.output.console import Console, create_console
from ccjk_config.schema.definitions import SUPPORTED_LANGS
from ccjk_config.scopes.base import ConfigScope
from ccjk_config.settings import PlatformSettings

SCOPE_NAMES = [scope.value for scope in ConfigScope]
CONCRETE_SCOPE_NAMES = [scope.value for scope in ConfigScope.concrete()]


@dataclass
class CliState:
    config: UnifiedConfig
    console: Console


def _handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report ConfigError through the console and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        state: CliState = click.get_current_context().obj
        try:
            return func(*args, **kwargs)
        except ConfigError as e:
            state.console.print_error(str(e))
            sys.exit(1)

    return wrapper


def parse_value(raw: str) -> Any:
    """Interpret a command line value as YAML (``60000`` -> int, ``true`` -> bool, ``[a, b]`` -> list)."""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


@click.group()
@click.version_option(version=__version__, prog_name="ccjk-config")
@click.option("--home", type=click.Path(path_type=Path), help="CCJK config directory (default ~/.ccjk)")
@click.option("--claude-dir", type=click.Path(path_type=Path), help="Claude Code settings directory (default ~/.claude)")
@click.option("--lang", type=click.Choice(list(SUPPORTED_LANGS)), default=None, help="Message language")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output and debug logs")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    home: Optional[Path],
    claude_dir: Optional[Path],
    lang: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """CCJK Config - local configuration platform.

    Manages three configuration documents:

    \b
    preferences:      ~/.ccjk/config.yaml
    native-settings:  ~/.claude/settings.json
    runtime-state:    ~/.ccjk/state.json
    """
    overrides = {key: value for key, value in (("home", home), ("claude_dir", claude_dir)) if value is not None}
    settings = PlatformSettings(**overrides)
    setup_cli_logging(settings.log_level, verbose=verbose)

    config = UnifiedConfig(ConfigContext.from_settings(settings))
    if lang is None:
        try:
            lang = config.preferences.get_or_default().get("general", {}).get("preferredLang", "en")
        except ConfigError as e:
            config.close()
            create_console(verbose=verbose, colored=not no_color).print_error(str(e))
            sys.exit(1)
    translator = CatalogTranslator(lang)
    config.translator = translator

    ctx.obj = CliState(config=config, console=create_console(verbose=verbose, colored=not no_color, translator=translator))
    ctx.call_on_close(config.close)


@cli.command()
@click.argument("scope", type=click.Choice(SCOPE_NAMES), default=ConfigScope.ALL.value)
@click.pass_obj
@_handle_errors
def show(state: CliState, scope: str) -> None:
    """Show configuration documents."""
    for name in CONCRETE_SCOPE_NAMES if scope == ConfigScope.ALL.value else [scope]:
        manager = state.config.manager(name)
        state.console.print_document(name, state.config.read(name), path=manager.path)


@cli.command()
@click.argument("scope", type=click.Choice(CONCRETE_SCOPE_NAMES))
@click.argument("path")
@click.pass_obj
@_handle_errors
def get(state: CliState, scope: str, path: str) -> None:
    """Print one value by dotted path.

    \b
    Example:
        ccjk-config get preferences general.preferredLang
    """
    state.console.print_value(path, state.config.get(scope, path))


@cli.command("set")
@click.argument("scope", type=click.Choice(CONCRETE_SCOPE_NAMES))
@click.argument("path")
@click.argument("value")
@click.option("--string", "as_string", is_flag=True, help="Store VALUE as a string without YAML parsing")
@click.pass_obj
@_handle_errors
def set_value(state: CliState, scope: str, path: str, value: str, as_string: bool) -> None:
    """Set one value by dotted path.

    VALUE is parsed as YAML, so numbers, booleans and lists keep their type.

    \b
    Example:
        ccjk-config set native-settings env.MCP_TIMEOUT 60000
    """
    parsed = value if as_string else parse_value(value)
    state.config.set(scope, path, parsed)
    state.console.print_success(f"{scope}: {path} = {parsed!r}")


@cli.command()
@click.argument("scope", type=click.Choice(SCOPE_NAMES), default=ConfigScope.ALL.value)
@click.pass_obj
@_handle_errors
def validate(state: CliState, scope: str) -> None:
    """Validate configuration documents against their schemas."""
    outcome = state.config.validate(scope)
    results = outcome if isinstance(outcome, dict) else {scope: outcome}
    for name, result in results.items():
        state.console.print_validation_result(name, result)
    if not all(result.valid for result in results.values()):
        sys.exit(1)


@cli.command()
@click.option("--status", "show_status", is_flag=True, help="Only report what would be migrated")
@click.option("--dry-run", "-n", is_flag=True, help="Transform and validate without writing")
@click.option("--no-backup", is_flag=True, help="Skip the migration backup")
@click.option("--force", "-f", is_flag=True, help="Migrate even if current documents exist")
@click.pass_obj
@_handle_errors
def migrate(state: CliState, show_status: bool, dry_run: bool, no_backup: bool, force: bool) -> None:
    """Migrate legacy configuration files into the current documents."""
    if show_status:
        state.console.print_migration_status(state.config.migration_status())
        return

    result = state.config.migrate(MigrationOptions(backup=not no_backup, dry_run=dry_run, force=force))
    state.console.print_migration_result(result, dry_run=dry_run)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.argument("scope", type=click.Choice(SCOPE_NAMES), default=ConfigScope.ALL.value)
@click.pass_obj
@_handle_errors
def backup(state: CliState, scope: str) -> None:
    """Create timestamped backups next to the configuration files."""
    for name, path in state.config.backup(scope).items():
        if path is None:
            state.console.print(f"[dim]{state.console.t('backup.none', scope=name)}[/dim]")
        else:
            state.console.print_success(state.console.t("backup.done", scope=name, path=path))


@cli.command()
@click.argument("scope", type=click.Choice(SCOPE_NAMES))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.option("--no-backup", is_flag=True, help="Do not back up the current files first")
@click.pass_obj
@_handle_errors
def reset(state: CliState, scope: str, yes: bool, no_backup: bool) -> None:
    """Reset configuration documents to defaults."""
    if not yes and not Confirm.ask(f"Reset {scope} to defaults?", default=False):
        state.console.print_warning("Reset cancelled")
        return

    for outcome in state.config.reset(scope, backup=not no_backup):
        state.console.print_success(state.console.t("reset.done", scope=outcome.scope.value))
        if outcome.backup_path is not None:
            state.console.print(f"  [dim]{state.console.t('backup.done', scope=outcome.scope.value, path=outcome.backup_path)}[/dim]")


@cli.command()
@click.argument("scope", type=click.Choice(SCOPE_NAMES), default=ConfigScope.ALL.value)
@click.pass_obj
@_handle_errors
def watch(state: CliState, scope: str) -> None:
    """Print configuration changes as they happen (Ctrl+C to stop)."""
    for name in CONCRETE_SCOPE_NAMES if scope == ConfigScope.ALL.value else [scope]:
        state.console.print_info(state.console.t("watch.started", path=state.config.manager(name).path))
        state.config.watch(name, functools.partial(state.console.print_change_event, name))

    stopped = threading.Event()
    try:
        while not stopped.wait(1.0):
            pass
    except KeyboardInterrupt:
        state.console.print()
    finally:
        state.config.close()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
