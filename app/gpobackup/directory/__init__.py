"""Directory-service backends for gpobackup.

This package provides the interface for querying and exporting Group
Policy data, and its PowerShell implementation.
"""

from gpobackup.directory.base import DirectoryService
from gpobackup.directory.powershell import PowerShellDirectory

__all__ = ["DirectoryService", "PowerShellDirectory"]
