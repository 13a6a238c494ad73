"""Run log record model.

Each backup run, successful or not, is appended to the run log as one
JSON line so operators can audit unattended runs.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from gpobackup.models.backup import RunSummary


@dataclass(frozen=True, slots=True)
class RunRecord:
    """Record of a single backup run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601 format with timezone).
        backup_root: Backup root the run wrote to.
        daily_folder: Daily folder name, None if the run failed before creating it.
        gpo_count: GPOs exported successfully.
        filter_count: WMI filters exported successfully.
        deleted_folders: Folders removed by the retention sweep.
        failures: Names of exports that failed under the continue policy.
        success: Whether the run completed without failures.
        error: Message of the error that aborted the run, if any.
    """

    id: str
    timestamp: str
    backup_root: str
    daily_folder: str | None = None
    gpo_count: int = 0
    filter_count: int = 0
    deleted_folders: tuple[str, ...] = ()
    failures: tuple[str, ...] = ()
    success: bool = True
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.id:
            msg = "Run record ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "backup_root": self.backup_root,
            "daily_folder": self.daily_folder,
            "gpo_count": self.gpo_count,
            "filter_count": self.filter_count,
            "deleted_folders": list(self.deleted_folders),
            "failures": list(self.failures),
            "success": self.success,
            "error": self.error,
            "metadata": self.metadata,
        }

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def record_from_summary(summary: RunSummary, metadata: dict[str, Any] | None = None) -> RunRecord:
    """Create a record for a run that reached the end."""
    return RunRecord(
        id=_new_id(),
        timestamp=_now(),
        backup_root=str(summary.backup_root),
        daily_folder=summary.daily_folder.name,
        gpo_count=len(summary.exports),
        filter_count=len(summary.filter_files),
        deleted_folders=tuple(summary.removed_folders),
        failures=tuple(f.name for f in summary.failures),
        success=summary.success,
        metadata=metadata or {},
    )


def record_from_error(
    backup_root: Path,
    error: Exception,
    metadata: dict[str, Any] | None = None,
    daily_folder: Path | None = None,
) -> RunRecord:
    """Create a record for a run aborted by an error.

    Args:
        backup_root: Backup root the run targeted.
        error: The error that aborted the run.
        metadata: Run options to store with the record.
        daily_folder: Daily folder holding the partial backup, if it was created.
    """
    return RunRecord(
        id=_new_id(),
        timestamp=_now(),
        backup_root=str(backup_root),
        daily_folder=daily_folder.name if daily_folder is not None else None,
        success=False,
        error=str(error),
        metadata=metadata or {},
    )
