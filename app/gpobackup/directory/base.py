"""Abstract base class for directory-service backends.

This module defines the DirectoryService interface: the queries and
export operations a backup run needs from Active Directory and the
Group Policy management tools.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from gpobackup.models.gpo import GpoInfo, WmiFilter


class DirectoryService(ABC):
    """Abstract base class for directory-service backends.

    Implementations block until each call completes; there is no
    cancellation. Every failure is raised as a DirectoryError subclass.

    Example:
        >>> directory = PowerShellDirectory()
        >>> if directory.is_available():
        ...     for gpo in directory.list_gpos():
        ...         print(gpo.display_name)
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend can be used on this machine.

        Returns:
            True if the management tooling is reachable, False otherwise.
        """

    @abstractmethod
    def list_gpos(self) -> list[GpoInfo]:
        """List every GPO in the domain.

        Returns:
            GPOs with their GUID and display name.

        Raises:
            DirectoryError: If the query fails.
        """

    @abstractmethod
    def resolve_gpo(self, name: str) -> GpoInfo:
        """Resolve a GPO display name to its GUID.

        Args:
            name: GPO display name.

        Returns:
            The matching GPO.

        Raises:
            GpoNotFoundError: If no GPO has that name.
            DirectoryError: If the query fails for another reason.
        """

    @abstractmethod
    def backup_gpo(self, gpo: GpoInfo, destination: Path) -> str:
        """Back up a GPO into an existing folder.

        Args:
            gpo: GPO to back up.
            destination: Folder that receives the backup artifact set.

        Returns:
            Identifier of the backup set.

        Raises:
            ExportError: If the backup fails.
        """

    @abstractmethod
    def write_report(self, gpo: GpoInfo, path: Path) -> None:
        """Write a GPO's HTML report.

        Args:
            gpo: GPO to report on.
            path: Report file to write.

        Raises:
            ExportError: If the report cannot be generated.
        """

    @abstractmethod
    def list_wmi_filters(self) -> list[WmiFilter]:
        """List every WMI filter object in the domain.

        Returns:
            Zero or more filters, always as a list.

        Raises:
            DirectoryError: If the query fails.
        """

    @abstractmethod
    def export_wmi_filter(self, wmi_filter: WmiFilter, path: Path) -> None:
        """Serialize a WMI filter's full directory object to a file.

        The file must round-trip into the complete object, not a text
        rendering of it.

        Args:
            wmi_filter: Filter to serialize.
            path: Destination file.

        Raises:
            ExportError: If the object cannot be read or written.
        """
