# CCJK Config Console Output
# Rich-based display of documents, validation, merge, migration and change events

from pathlib import Path
from typing import Any, Optional

import yaml
from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ccjk_config.collaborators import CatalogTranslator, Translator
from ccjk_config.merge.engine import MergeResult
from ccjk_config.migration.engine import MigrationStatus
from ccjk_config.migration.steps import MigrationResult, MigrationState
from ccjk_config.schema.validator import ValidationResult
from ccjk_config.watcher.diff import ConfigChangeEvent


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for configuration commands.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, translator: Optional[Translator] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            translator: Message catalog (default: English).
        """
        self.verbose = verbose
        self.translator = translator or CatalogTranslator()
        self._console = RichConsole(force_terminal=colored, no_color=not colored)

    def t(self, key: str, **params: Any) -> str:
        return self.translator.t(key, **params)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}", highlight=False)

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]", highlight=False)

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]", highlight=False)

    def print_document(self, name: str, doc: Optional[dict[str, Any]], *, path: Optional[Path] = None) -> None:
        """
        Print a configuration document as highlighted YAML.

        Args:
            name: Scope name used as the panel title.
            doc: Document, or None if the file does not exist.
            path: Backing file shown in the subtitle.
        """
        if doc is None:
            self._console.print(f"[dim]{name}: not configured[/dim]")
            return
        text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True, default_flow_style=False)
        self._console.print(
            Panel(
                Syntax(text.rstrip(), "yaml", theme="monokai"),
                title=name,
                subtitle=str(path) if path else None,
                border_style="blue",
            )
        )

    def print_value(self, path: str, value: Any) -> None:
        if isinstance(value, (dict, list)):
            self._console.print(Syntax(yaml.safe_dump(value, sort_keys=False, allow_unicode=True).rstrip(), "yaml"))
        else:
            self._console.print(f"{path} = {value!r}", highlight=False)

    def print_validation_result(self, scope: str, result: ValidationResult) -> None:
        """Print validation errors and warnings for one scope."""
        if result.valid:
            self._console.print(f"[green]✓[/green] {self.t('validation.ok', scope=scope)}")
        else:
            self._console.print(f"[red]✗[/red] {self.t('validation.failed', scope=scope, count=len(result.errors))}")
            table = Table(show_header=True, header_style="bold")
            table.add_column("Path")
            table.add_column("Code", style="dim")
            table.add_column("Message")
            for error in result.errors:
                table.add_row(error.path or "(root)", error.code.value, error.message)
            self._console.print(table)

        if result.warnings and (self.verbose or not result.valid):
            for warning in result.warnings:
                hint = f" [dim]→ {warning.suggestion}[/dim]" if warning.suggestion else ""
                self._console.print(f"  [yellow]![/yellow] {warning.path}: {warning.message}{hint}", highlight=False)

    def print_merge_result(self, result: MergeResult) -> None:
        """Print merge conflicts and warnings."""
        info = result.source_info
        if info is not None:
            self._console.print(
                f"Merged with strategy [bold]{info.strategy.value}[/bold]: "
                f"{len(info.added)} added, {len(info.overridden)} overridden"
            )
        if result.conflicts:
            table = Table(title="Conflicts", show_header=True, header_style="bold")
            table.add_column("Path")
            table.add_column("Current")
            table.add_column("Incoming")
            table.add_column("Chosen", style="green")
            for conflict in result.conflicts:
                table.add_row(
                    conflict.path,
                    repr(conflict.base_value),
                    repr(conflict.source_value),
                    repr(conflict.chosen_value),
                )
            self._console.print(table)
        for warning in result.warnings:
            self.print_warning(warning)

    def print_migration_status(self, status: MigrationStatus) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Scope")
        table.add_column("Version")
        for scope, version in status.versions.items():
            table.add_row(scope, version or "[dim]missing[/dim]")
        self._console.print(table)

        if not status.legacy:
            self._console.print(f"[dim]{self.t('migration.none')}[/dim]")
            return
        for info in status.legacy:
            self._console.print(
                f"  [yellow]•[/yellow] {info.path} [dim]({info.type.value} {info.version} → "
                f"{info.target_scope.value})[/dim]",
                highlight=False,
            )
        marker = "[yellow]needed[/yellow]" if status.needs_migration else "[green]up to date[/green]"
        self._console.print(f"Migration: {marker}")

    def print_migration_result(self, result: MigrationResult, *, dry_run: bool = False) -> None:
        """
        Print migration result summary.

        Args:
            result: Migration result to display.
            dry_run: Whether this was a dry run (changes wording).
        """
        if not result.records:
            self._console.print(f"[dim]{self.t('migration.none')}[/dim]")
            return

        for record in result.records:
            if record.state == MigrationState.VERIFIED or (dry_run and record.state == MigrationState.TRANSFORMED):
                self._console.print(f"[green]✓[/green] {record.path} → {record.target_scope.value}", highlight=False)
            else:
                reason = f": {record.error}" if record.error else ""
                self._console.print(f"[red]✗[/red] {record.path}{reason}", highlight=False)

        status_text = "Dry run completed" if dry_run else "Migration completed"
        lines = [f"[green]{status_text}[/green]" if result.success else f"[red]{status_text} with errors[/red]"]
        if result.migrated_scopes:
            lines.append(self.t("migration.done", scopes=", ".join(result.migrated_scopes)))
        if result.backup_path:
            lines.append(self.t("migration.backup", path=result.backup_path))
        lines.extend(f"[red]{error}[/red]" for error in result.errors)
        lines.extend(f"[yellow]{warning}[/yellow]" for warning in result.warnings)
        self._console.print(
            Panel("\n".join(lines), title="Summary", border_style="green" if result.success else "red")
        )

    def print_change_event(self, scope: str, event: ConfigChangeEvent) -> None:
        self._console.print(
            f"[dim]{event.timestamp:%H:%M:%S}[/dim] [bold]{scope}[/bold] "
            f"{event.path}: {event.old_value!r} → {event.new_value!r} [dim]({event.source.value})[/dim]",
            highlight=False,
        )


def create_console(*, verbose: bool = False, colored: bool = True, translator: Optional[Translator] = None) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.
        translator: Message catalog.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored, translator=translator)
