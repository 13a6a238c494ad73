"""Backup run result models.

This module defines the immutable records produced by a backup run:
per-GPO export outcomes, per-folder retention outcomes, and the
summary the CLI renders at the end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path

from gpobackup.models.gpo import GpoInfo


class ExportErrorPolicy(str, Enum):
    """What a run does when a single GPO or filter export fails.

    Attributes:
        ABORT: Propagate the error; remaining exports and retention are skipped.
        CONTINUE: Log the error, record it, and move on to the next item.
    """

    ABORT = "abort"
    CONTINUE = "continue"


class RetentionAction(str, Enum):
    """Outcome of the retention sweep for one subfolder.

    Attributes:
        DELETED: Folder was older than the threshold and was removed.
        WOULD_DELETE: Dry-run; folder is older than the threshold.
        KEPT: Folder is within the retention window.
        SKIPPED_UNPARSEABLE: Folder name is not a date; left untouched.
        FAILED: Deletion was attempted and raised an error.
    """

    DELETED = "deleted"
    WOULD_DELETE = "would_delete"
    KEPT = "kept"
    SKIPPED_UNPARSEABLE = "skipped_unparseable"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DateParseResult:
    """Result of interpreting a folder name as a daily-folder date.

    Exactly one of ``value`` and ``error`` is set.
    """

    name: str
    value: date | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True if the name parsed to a date."""
        return self.value is not None


@dataclass(frozen=True, slots=True)
class RetentionResult:
    """Retention outcome for a single subfolder of the backup root.

    Attributes:
        name: Folder name.
        action: What the sweep did with it.
        age_days: Whole days since the folder's date, None if unparseable.
        error: Warning text for skipped or failed folders.
    """

    name: str
    action: RetentionAction
    age_days: int | None = None
    error: str | None = None

    @property
    def removed(self) -> bool:
        """True if the folder is gone (or would be, in a dry run)."""
        return self.action in (RetentionAction.DELETED, RetentionAction.WOULD_DELETE)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Successful export of one GPO.

    Attributes:
        gpo: The resolved GPO.
        folder: Object folder that received the backup.
        report_path: Path of the HTML report.
        backup_id: Identifier of the backup set written by the export.
    """

    gpo: GpoInfo
    folder: Path
    report_path: Path
    backup_id: str | None = None


@dataclass(frozen=True, slots=True)
class ExportFailure:
    """A GPO or WMI filter whose export failed under the continue policy."""

    name: str
    error: str


@dataclass(slots=True)
class RunSummary:
    """Everything a backup run produced.

    Attributes:
        backup_root: Operator-supplied backup root.
        daily_folder: Today's dated folder.
        exports: Successful GPO exports.
        filter_files: Serialized WMI filter files.
        failures: Exports that failed under the continue policy.
        retention: Per-folder retention outcomes.
    """

    backup_root: Path
    daily_folder: Path
    exports: list[ExportResult] = field(default_factory=lambda: [])
    filter_files: list[Path] = field(default_factory=lambda: [])
    failures: list[ExportFailure] = field(default_factory=lambda: [])
    retention: list[RetentionResult] = field(default_factory=lambda: [])

    @property
    def success(self) -> bool:
        """True if no export failed."""
        return not self.failures

    @property
    def removed_folders(self) -> list[str]:
        """Names of folders deleted (or marked for deletion) by retention."""
        return [r.name for r in self.retention if r.removed]
