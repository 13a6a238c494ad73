"""Retention sweep for dated backup folders.

Daily folders are named ``YYYY-MM-DD``. The sweep parses each immediate
subfolder of the backup root back into a date and deletes the ones older
than the retention window. Folders whose names are not dates are never
touched.
"""

import logging
import os
import shutil
import stat
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from gpobackup.models.backup import DateParseResult, RetentionAction, RetentionResult
from gpobackup.security.permissions import check_delete_permission

logger = logging.getLogger(__name__)

DAILY_FOLDER_FORMAT = "%Y-%m-%d"


def daily_folder_name(day: date) -> str:
    """Name of the daily folder for a date."""
    return day.strftime(DAILY_FOLDER_FORMAT)


def parse_folder_date(name: str) -> DateParseResult:
    """Interpret a folder name as a daily-folder date.

    Only names that :func:`daily_folder_name` could have produced are
    accepted, so ``2024-6-5`` fails even though strptime would take it.

    Args:
        name: Folder name.

    Returns:
        DateParseResult with either the date or the reason it failed.
    """
    try:
        parsed = datetime.strptime(name, DAILY_FOLDER_FORMAT).date()
    except ValueError as e:
        return DateParseResult(name=name, error=str(e))

    if daily_folder_name(parsed) != name:
        return DateParseResult(
            name=name,
            error=f"'{name}' is not in canonical {DAILY_FOLDER_FORMAT} form",
        )
    return DateParseResult(name=name, value=parsed)


def _make_writable_and_retry(
    func: Callable[..., object], path: str, exc: BaseException
) -> None:
    """rmtree error handler: make the entry and its parent writable, retry once.

    Windows refuses to delete read-only files; POSIX refuses to unlink
    entries of a directory without write permission.
    """
    if isinstance(exc, FileNotFoundError):
        return
    mode = stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC
    os.chmod(os.path.dirname(path), mode)
    os.chmod(path, mode)
    func(path)


def force_remove_tree(path: Path) -> None:
    """Recursively delete a directory, including read-only entries.

    Raises:
        OSError: If an entry still cannot be removed.
    """
    shutil.rmtree(path, onexc=_make_writable_and_retry)


class RetentionSweeper:
    """Deletes daily folders older than a retention window.

    Each folder is handled independently: a name that does not parse or
    a deletion that fails is logged as a warning and the sweep moves on.

    Example:
        >>> sweeper = RetentionSweeper(retention_days=30)
        >>> for result in sweeper.sweep(Path("D:/GPOBackups")):
        ...     print(result.name, result.action.value)
    """

    def __init__(
        self,
        retention_days: int,
        *,
        dry_run: bool = False,
        today: Callable[[], date] = date.today,
        powershell: str | None = None,
        acl_timeout: float = 60.0,
    ) -> None:
        """Initialize the sweeper.

        Args:
            retention_days: Retention window in whole days (>= 0).
            dry_run: If True, only report folders that would be deleted.
            today: Clock returning the current local date.
            powershell: PowerShell executable for the Windows ACL check.
            acl_timeout: Seconds allowed for reading the ACL.

        Raises:
            ValueError: If retention_days is negative.
        """
        if retention_days < 0:
            msg = f"Retention days must be >= 0, got {retention_days}"
            raise ValueError(msg)
        self._retention_days = retention_days
        self._dry_run = dry_run
        self._today = today
        self._powershell = powershell
        self._acl_timeout = acl_timeout

    def sweep(self, root: Path) -> list[RetentionResult]:
        """Apply the retention window to every subfolder of root.

        Args:
            root: Backup root containing daily folders.

        Returns:
            One RetentionResult per subfolder, sorted by name. Empty if
            the current principal may not delete inside root.
        """
        if not check_delete_permission(
            root, executable=self._powershell, timeout=self._acl_timeout
        ):
            logger.warning(
                "No delete permission on %s; skipping retention cleanup", root
            )
            return []

        today = self._today()
        try:
            children = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError as e:
            logger.warning("Cannot list backup folders in %s: %s", root, e)
            return []

        return [self._sweep_folder(folder, today) for folder in children]

    def _sweep_folder(self, folder: Path, today: date) -> RetentionResult:
        """Apply the retention window to a single folder."""
        parsed = parse_folder_date(folder.name)
        if not parsed.ok or parsed.value is None:
            logger.warning(
                "Skipping folder %s: name is not a %s date",
                folder.name,
                DAILY_FOLDER_FORMAT,
            )
            return RetentionResult(
                name=folder.name,
                action=RetentionAction.SKIPPED_UNPARSEABLE,
                error=parsed.error,
            )

        age_days = (today - parsed.value).days
        if age_days <= self._retention_days:
            return RetentionResult(
                name=folder.name, action=RetentionAction.KEPT, age_days=age_days
            )

        if self._dry_run:
            logger.info("Dry-run: would delete %s (%d days old)", folder.name, age_days)
            return RetentionResult(
                name=folder.name, action=RetentionAction.WOULD_DELETE, age_days=age_days
            )

        try:
            force_remove_tree(folder)
        except OSError as e:
            logger.warning("Failed to delete old backup %s: %s", folder, e)
            return RetentionResult(
                name=folder.name,
                action=RetentionAction.FAILED,
                age_days=age_days,
                error=str(e),
            )

        logger.info("Deleted old backup %s (%d days old)", folder.name, age_days)
        return RetentionResult(
            name=folder.name, action=RetentionAction.DELETED, age_days=age_days
        )
