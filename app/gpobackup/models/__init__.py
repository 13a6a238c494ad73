"""Data models for gpobackup.

This module exports the core data structures used throughout the application.
"""

from gpobackup.models.backup import (
    DateParseResult,
    ExportErrorPolicy,
    ExportFailure,
    ExportResult,
    RetentionAction,
    RetentionResult,
    RunSummary,
)
from gpobackup.models.errors import (
    BackupError,
    BackupPathError,
    DirectoryError,
    ExportError,
    GpoNotFoundError,
)
from gpobackup.models.gpo import GpoInfo, WmiFilter, safe_file_name
from gpobackup.models.run import RunRecord, record_from_error, record_from_summary

__all__ = [
    "BackupError",
    "BackupPathError",
    "DateParseResult",
    "DirectoryError",
    "ExportError",
    "ExportErrorPolicy",
    "ExportFailure",
    "ExportResult",
    "GpoInfo",
    "GpoNotFoundError",
    "RetentionAction",
    "RetentionResult",
    "RunRecord",
    "RunSummary",
    "WmiFilter",
    "record_from_error",
    "record_from_summary",
    "safe_file_name",
]
