"""PowerShell directory-service backend.

Drives the GroupPolicy and ActiveDirectory PowerShell modules
(Get-GPO, Backup-GPO, Get-GPOReport, Get-ADObject, Export-Clixml)
and reads their results back as JSON.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from gpobackup.directory.base import DirectoryService
from gpobackup.models.errors import DirectoryError, ExportError, GpoNotFoundError
from gpobackup.models.gpo import GpoInfo, WmiFilter
from gpobackup.utils.shell import (
    CommandResult,
    find_powershell,
    powershell_command,
    quote_powershell,
    run_command,
)

logger = logging.getLogger(__name__)

# Prepended to every script: fail on the first error, keep progress bars
# out of captured output, and emit UTF-8 so display names survive.
_PREAMBLE = (
    "$ErrorActionPreference = 'Stop'\n"
    "$ProgressPreference = 'SilentlyContinue'\n"
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8\n"
)

# Exit code the resolve script uses for "no GPO with that name".
_EXIT_NOT_FOUND = 3

WMI_FILTER_CLASS = "msWMI-Som"

_WMI_PROPERTIES = (
    "msWMI-Name",
    "msWMI-ID",
    "msWMI-Author",
    "msWMI-Parm1",
    "msWMI-Parm2",
    "msWMI-CreationDate",
    "msWMI-ChangeDate",
)

_GPO_SELECT = "Select-Object @{n='Id';e={$_.Id.ToString()}}, DisplayName"


class PowerShellDirectory(DirectoryService):
    """Directory backend that shells out to PowerShell.

    Each operation runs one short script through ``-EncodedCommand``.
    Queries wrap their output in ``@(...)`` and ``ConvertTo-Json
    -InputObject`` so a single result still arrives as a JSON array.

    Attributes:
        executable: Explicit PowerShell executable, None to auto-detect.
        timeout: Seconds allowed per call.
    """

    def __init__(self, executable: str | None = None, timeout: float = 600.0) -> None:
        """Initialize the backend.

        Args:
            executable: PowerShell executable name or path (None = auto-detect).
            timeout: Seconds allowed for each PowerShell call.
        """
        self._executable = executable
        self._timeout = timeout

    def is_available(self) -> bool:
        """Check if a PowerShell executable can be found."""
        return find_powershell(self._executable) is not None

    def list_gpos(self) -> list[GpoInfo]:
        """List every GPO via ``Get-GPO -All``."""
        script = (
            "Import-Module GroupPolicy\n"
            f"ConvertTo-Json -Compress -InputObject @(Get-GPO -All | {_GPO_SELECT})"
        )
        records = self._query(script, "Get-GPO -All")
        gpos = [self._to_gpo(record) for record in records]
        logger.debug("Directory returned %d GPOs", len(gpos))
        return gpos

    def resolve_gpo(self, name: str) -> GpoInfo:
        """Resolve a GPO by display name via ``Get-GPO -Name``."""
        script = (
            "Import-Module GroupPolicy\n"
            f"try {{ $gpo = Get-GPO -Name {quote_powershell(name)} }}\n"
            f"catch [System.ArgumentException] {{ exit {_EXIT_NOT_FOUND} }}\n"
            f"ConvertTo-Json -Compress -InputObject @($gpo | {_GPO_SELECT})"
        )
        description = f"Get-GPO -Name {name}"
        result = self._run(script, description)
        if result.returncode == _EXIT_NOT_FOUND:
            raise GpoNotFoundError(name)
        records = self._parse(self._checked(result, description), description)
        if not records:
            raise GpoNotFoundError(name)
        return self._to_gpo(records[0])

    def backup_gpo(self, gpo: GpoInfo, destination: Path) -> str:
        """Back up a GPO via ``Backup-GPO``."""
        script = (
            "Import-Module GroupPolicy\n"
            f"$backup = Backup-GPO -Guid {quote_powershell(gpo.id)} "
            f"-Path {quote_powershell(str(destination))}\n"
            "ConvertTo-Json -Compress -InputObject @(@{Id = $backup.Id.ToString()})"
        )
        result = self._run(script, f"Backup-GPO {gpo.display_name}")
        if not result.success:
            raise ExportError(
                f"Backup-GPO failed for '{gpo.display_name}': {_stderr(result)}"
            )
        records = self._parse(result, f"Backup-GPO {gpo.display_name}")
        backup_id = str(records[0].get("Id", "")) if records else ""
        logger.debug("Backed up GPO %s as %s", gpo.display_name, backup_id or "?")
        return backup_id

    def write_report(self, gpo: GpoInfo, path: Path) -> None:
        """Write an HTML report via ``Get-GPOReport``."""
        script = (
            "Import-Module GroupPolicy\n"
            f"Get-GPOReport -Guid {quote_powershell(gpo.id)} -ReportType Html "
            f"-Path {quote_powershell(str(path))}"
        )
        result = self._run(script, f"Get-GPOReport {gpo.display_name}")
        if not result.success:
            raise ExportError(
                f"Get-GPOReport failed for '{gpo.display_name}': {_stderr(result)}"
            )

    def list_wmi_filters(self) -> list[WmiFilter]:
        """List WMI filters via ``Get-ADObject``."""
        properties = ", ".join(quote_powershell(p) for p in _WMI_PROPERTIES)
        script = (
            "Import-Module ActiveDirectory\n"
            f"$filters = Get-ADObject -Filter 'objectClass -eq \"{WMI_FILTER_CLASS}\"' "
            f"-Properties {properties}\n"
            "ConvertTo-Json -Compress -Depth 3 -InputObject "
            f"@($filters | Select-Object DistinguishedName, {properties})"
        )
        records = self._query(script, "Get-ADObject msWMI-Som")
        filters: list[WmiFilter] = []
        for record in records:
            try:
                filters.append(WmiFilter.from_dict(record))
            except (KeyError, ValueError) as e:
                msg = f"Malformed WMI filter record from directory: {e}"
                raise DirectoryError(msg) from e
        logger.debug("Directory returned %d WMI filters", len(filters))
        return filters

    def export_wmi_filter(self, wmi_filter: WmiFilter, path: Path) -> None:
        """Serialize the full filter object via ``Export-Clixml``."""
        script = (
            "Import-Module ActiveDirectory\n"
            f"Get-ADObject -Identity {quote_powershell(wmi_filter.distinguished_name)} "
            "-Properties * | "
            f"Export-Clixml -Path {quote_powershell(str(path))}"
        )
        result = self._run(script, f"Export-Clixml {wmi_filter.name}")
        if not result.success:
            raise ExportError(
                f"Export of WMI filter '{wmi_filter.name}' failed: {_stderr(result)}"
            )

    # === Private helpers ===

    def _run(self, script: str, description: str) -> CommandResult:
        """Run a script, translating launch failures into DirectoryError."""
        executable = find_powershell(self._executable)
        if executable is None:
            msg = "PowerShell is not available on this system"
            raise DirectoryError(msg)

        logger.debug("Running PowerShell: %s", description)
        try:
            return run_command(
                powershell_command(executable, _PREAMBLE + script),
                timeout=self._timeout,
                encoding="utf-8",
            )
        except subprocess.TimeoutExpired as e:
            msg = f"{description} timed out after {self._timeout:.0f}s"
            raise DirectoryError(msg) from e
        except OSError as e:
            msg = f"Could not start PowerShell for {description}: {e}"
            raise DirectoryError(msg) from e

    def _query(self, script: str, description: str) -> list[dict[str, Any]]:
        """Run a query script and return its JSON records."""
        result = self._checked(self._run(script, description), description)
        return self._parse(result, description)

    def _checked(self, result: CommandResult, description: str) -> CommandResult:
        """Raise DirectoryError if the command failed."""
        if not result.success:
            raise DirectoryError(f"{description} failed: {_stderr(result)}")
        return result

    def _parse(self, result: CommandResult, description: str) -> list[dict[str, Any]]:
        """Decode JSON output into a list of records.

        Empty output means no records. A bare object is one record.
        """
        text = result.stdout.strip().lstrip("\ufeff")
        if not text:
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"{description} returned invalid JSON: {e}"
            raise DirectoryError(msg) from e

        items = data if isinstance(data, list) else [data]
        if not all(isinstance(item, dict) for item in items):
            msg = f"{description} returned unexpected JSON: {text[:100]!r}"
            raise DirectoryError(msg)
        return items

    def _to_gpo(self, record: dict[str, Any]) -> GpoInfo:
        """Convert a JSON record to GpoInfo."""
        try:
            return GpoInfo.from_dict(record)
        except (KeyError, ValueError) as e:
            msg = f"Malformed GPO record from directory: {e}"
            raise DirectoryError(msg) from e


def _stderr(result: CommandResult) -> str:
    """Best available error text from a failed command."""
    return result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
