"""Backup run orchestration.

A run validates the backup root, creates today's dated folder, exports
every GPO into its own subfolder, serializes every WMI filter into
``WMI_Filters``, and finally applies the retention window to the root.
Steps run strictly in that order on a single thread.
"""

import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path

from gpobackup.backup.exporter import GpoExporter
from gpobackup.backup.retention import RetentionSweeper, daily_folder_name
from gpobackup.core.config import BackupSettings
from gpobackup.directory.base import DirectoryService
from gpobackup.models.backup import ExportErrorPolicy, ExportFailure, RunSummary
from gpobackup.models.errors import BackupPathError, DirectoryError
from gpobackup.models.gpo import safe_file_name

logger = logging.getLogger(__name__)

FILTERS_FOLDER_NAME = "WMI_Filters"


def validate_backup_root(root: Path) -> Path:
    """Check that the backup root exists and is a directory.

    Args:
        root: Operator-supplied backup root.

    Returns:
        The root, unchanged.

    Raises:
        BackupPathError: If the root is missing or not a directory.
    """
    if not root.exists():
        msg = f"Backup path does not exist: {root}"
        raise BackupPathError(msg)
    if not root.is_dir():
        msg = f"Backup path is not a directory: {root}"
        raise BackupPathError(msg)
    return root


def _ensure_folder(path: Path) -> Path:
    """Create a folder if missing.

    Raises:
        BackupPathError: If the folder cannot be created.
    """
    try:
        path.mkdir(exist_ok=True)
    except OSError as e:
        msg = f"Cannot create folder {path}: {e}"
        raise BackupPathError(msg) from e
    return path


def claim_name(base: str, suffix: str, used: set[str]) -> str:
    """Reserve a file or folder name that no earlier object in the run took.

    Names compare case-insensitively, as they do on Windows volumes. On a
    clash the object's unique suffix is appended in parentheses.

    Args:
        base: Sanitized name derived from the object's display name.
        suffix: Identifier unique to the object (GPO GUID, filter ID).
        used: Names already taken in the target folder; updated in place.

    Returns:
        The reserved name.
    """
    name = base
    counter = 1
    while name.casefold() in used:
        tag = suffix if counter == 1 else f"{suffix}-{counter}"
        name = safe_file_name(f"{base} ({tag})")
        counter += 1
    if name != base:
        logger.warning("Name %s is already used in this run; writing to %s", base, name)
    used.add(name.casefold())
    return name


class BackupRunner:
    """Runs one complete backup against a backup root.

    Attributes:
        daily_folder: Today's folder once the run has created it, so a
            caller can report where a partial backup was left.
    """

    def __init__(
        self,
        directory: DirectoryService,
        settings: BackupSettings,
        *,
        dry_run_retention: bool = False,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the runner.

        Args:
            directory: Directory-service backend.
            settings: Validated backup settings.
            dry_run_retention: If True, retention only reports.
            today: Clock returning the current local date.
        """
        self._directory = directory
        self._settings = settings
        self._today = today
        self._exporter = GpoExporter(directory)
        self._daily_folder: Path | None = None
        self._sweeper = RetentionSweeper(
            settings.retention_days,
            dry_run=dry_run_retention,
            today=today,
            powershell=settings.powershell,
            acl_timeout=float(settings.command_timeout),
        )

    @property
    def daily_folder(self) -> Path | None:
        """Daily folder created by the last run, None before it exists."""
        return self._daily_folder

    def run(self, root: Path) -> RunSummary:
        """Run the backup.

        Args:
            root: Backup root; must already exist.

        Returns:
            RunSummary describing everything the run produced.

        Raises:
            BackupPathError: If root is invalid or a folder cannot be created.
            DirectoryError: On the first export failure under the abort policy.
        """
        self._daily_folder = None
        validate_backup_root(root)

        daily_folder = _ensure_folder(root / daily_folder_name(self._today()))
        self._daily_folder = daily_folder
        logger.info("Backing up to %s", daily_folder)
        summary = RunSummary(backup_root=root, daily_folder=daily_folder)

        self._export_gpos(daily_folder, summary)
        self._export_filters(daily_folder, summary)

        summary.retention = self._sweeper.sweep(root)
        return summary

    def _export_gpos(self, daily_folder: Path, summary: RunSummary) -> None:
        """Export every GPO into its own folder."""
        gpos = self._directory.list_gpos()
        logger.info("Found %d GPOs", len(gpos))

        used = {FILTERS_FOLDER_NAME.casefold()}
        for gpo in gpos:
            name = claim_name(gpo.folder_name, gpo.id, used)
            folder = _ensure_folder(daily_folder / name)
            try:
                summary.exports.append(self._exporter.export(gpo.display_name, folder))
            except DirectoryError as e:
                self._handle_failure(gpo.display_name, e, summary)

    def _export_filters(self, daily_folder: Path, summary: RunSummary) -> None:
        """Serialize every WMI filter into the filters folder."""
        filters_folder = _ensure_folder(daily_folder / FILTERS_FOLDER_NAME)
        filters = self._directory.list_wmi_filters()
        if not filters:
            logger.info("No WMI filters found")
            return

        used: set[str] = set()
        for wmi_filter in filters:
            name = claim_name(wmi_filter.file_stem, wmi_filter.filter_id, used)
            path = filters_folder / f"{name}.xml"
            try:
                self._directory.export_wmi_filter(wmi_filter, path)
            except DirectoryError as e:
                self._handle_failure(f"WMI filter {wmi_filter.name}", e, summary)
                continue
            summary.filter_files.append(path)
        logger.info("Exported %d WMI filters", len(summary.filter_files))

    def _handle_failure(self, name: str, error: DirectoryError, summary: RunSummary) -> None:
        """Apply the export error policy to a failed export.

        Raises:
            DirectoryError: The original error, under the abort policy.
        """
        if self._settings.on_error == ExportErrorPolicy.ABORT:
            raise error
        logger.warning("Export of %s failed, continuing: %s", name, error)
        summary.failures.append(ExportFailure(name=name, error=str(error)))
