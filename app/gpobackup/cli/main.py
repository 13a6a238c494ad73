"""Main CLI application entry point.

Defines the single ``gpobackup`` command: back up every GPO and WMI
filter into today's folder under BACKUP_PATH, then prune old folders.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from gpobackup import __version__
from gpobackup.backup.runner import BackupRunner, validate_backup_root
from gpobackup.cli.display import print_run_summary
from gpobackup.core.config import BackupSettings, ConfigError, load_settings
from gpobackup.core.state import RunLog
from gpobackup.directory.powershell import PowerShellDirectory
from gpobackup.models.backup import ExportErrorPolicy
from gpobackup.models.errors import BackupError, BackupPathError
from gpobackup.models.run import RunRecord, record_from_error, record_from_summary
from gpobackup.utils.formatting import err_console, print_error, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="gpobackup",
    help="Scheduled Group Policy backup with retention cleanup.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"gpobackup version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


@app.command()
def main(
    backup_path: Annotated[
        Path,
        typer.Argument(help="Existing directory that receives the dated backup folders."),
    ],
    retention_days: Annotated[
        int | None,
        typer.Option(
            "--retention-days",
            "-r",
            min=0,
            help="Delete dated folders older than this many days. [default: 30]",
        ),
    ] = None,
    on_error: Annotated[
        ExportErrorPolicy | None,
        typer.Option(
            "--on-error",
            case_sensitive=False,
            help="Abort the run or continue when a GPO export fails. [default: abort]",
        ),
    ] = None,
    dry_run_retention: Annotated[
        bool,
        typer.Option(
            "--dry-run-retention",
            help="Report old backup folders without deleting them.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file (default: ~/.config/gpobackup/config.toml).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Back up all GPOs and WMI filters, then prune old backups."""
    configure_logging(verbose)

    try:
        validate_backup_root(backup_path)
    except BackupPathError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        settings = _resolve_settings(config, retention_days, on_error)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    logger.debug("Effective settings: %s", settings.model_dump())

    directory = PowerShellDirectory(
        executable=settings.powershell,
        timeout=float(settings.command_timeout),
    )
    if not directory.is_available():
        print_error("PowerShell was not found; install it or set 'powershell' in the config.")
        raise typer.Exit(code=1)

    runner = BackupRunner(directory, settings, dry_run_retention=dry_run_retention)
    metadata = {
        "retention_days": settings.retention_days,
        "on_error": settings.on_error.value,
        "dry_run_retention": dry_run_retention,
    }

    try:
        summary = runner.run(backup_path)
    except BackupError as e:
        print_error(str(e))
        _record_run(
            settings,
            record_from_error(backup_path, e, metadata, daily_folder=runner.daily_folder),
        )
        raise typer.Exit(code=1) from e

    print_run_summary(summary, settings.retention_days, dry_run_retention)
    _record_run(settings, record_from_summary(summary, metadata))

    if not summary.success:
        raise typer.Exit(code=1)


# === Private helper functions ===


def _resolve_settings(
    config: Path | None,
    retention_days: int | None,
    on_error: ExportErrorPolicy | None,
) -> BackupSettings:
    """Load settings and apply command-line overrides."""
    settings = load_settings(config)
    overrides: dict[str, object] = {}
    if retention_days is not None:
        overrides["retention_days"] = retention_days
    if on_error is not None:
        overrides["on_error"] = on_error
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def _record_run(settings: BackupSettings, record: RunRecord) -> None:
    """Append the run to the run log; failures only warn."""
    if not settings.record_history:
        return
    try:
        RunLog().record(record)
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record run to log: {e}")


if __name__ == "__main__":
    app()
