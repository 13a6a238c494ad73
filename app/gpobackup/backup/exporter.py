"""Single-GPO export: backup artifact plus HTML report."""

import logging
from pathlib import Path

from gpobackup.directory.base import DirectoryService
from gpobackup.models.backup import ExportResult
from gpobackup.models.errors import ExportError

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "GPOReport.html"


class GpoExporter:
    """Exports one GPO into an existing folder.

    The GPO is looked up by display name, backed up into the folder, and
    its HTML report is written next to the backup. Errors from the
    directory are not caught here.
    """

    def __init__(self, directory: DirectoryService) -> None:
        self._directory = directory

    def export(self, name: str, destination: Path) -> ExportResult:
        """Export a GPO by display name.

        Args:
            name: GPO display name.
            destination: Existing folder for this GPO.

        Returns:
            ExportResult describing the written backup and report.

        Raises:
            ExportError: If destination is not an existing directory, or
                the backup or report call fails.
            GpoNotFoundError: If no GPO has that name.
            DirectoryError: If the lookup fails for another reason.
        """
        if not destination.is_dir():
            msg = f"Export destination does not exist: {destination}"
            raise ExportError(msg)

        gpo = self._directory.resolve_gpo(name)
        backup_id = self._directory.backup_gpo(gpo, destination)

        report_path = destination / REPORT_FILE_NAME
        self._directory.write_report(gpo, report_path)

        logger.info("Backed up GPO %s to %s", gpo.display_name, destination)
        return ExportResult(
            gpo=gpo,
            folder=destination,
            report_path=report_path,
            backup_id=backup_id or None,
        )
