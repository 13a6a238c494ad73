"""Exception hierarchy for backup operations."""


class BackupError(Exception):
    """Base exception for gpobackup failures."""


class BackupPathError(BackupError):
    """Raised when the backup root is missing or not a directory."""


class DirectoryError(BackupError):
    """Raised when a directory-service call fails."""


class GpoNotFoundError(DirectoryError):
    """Raised when a GPO cannot be resolved by name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"GPO not found: {name}")
        self.name = name


class ExportError(DirectoryError):
    """Raised when a backup, report, or filter export fails."""
