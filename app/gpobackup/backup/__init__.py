"""Backup operations: GPO export, retention sweep, and run orchestration."""

from gpobackup.backup.exporter import REPORT_FILE_NAME, GpoExporter
from gpobackup.backup.retention import (
    DAILY_FOLDER_FORMAT,
    RetentionSweeper,
    daily_folder_name,
    parse_folder_date,
)
from gpobackup.backup.runner import (
    FILTERS_FOLDER_NAME,
    BackupRunner,
    claim_name,
    validate_backup_root,
)

__all__ = [
    "DAILY_FOLDER_FORMAT",
    "FILTERS_FOLDER_NAME",
    "REPORT_FILE_NAME",
    "BackupRunner",
    "GpoExporter",
    "RetentionSweeper",
    "claim_name",
    "daily_folder_name",
    "parse_folder_date",
    "validate_backup_root",
]
