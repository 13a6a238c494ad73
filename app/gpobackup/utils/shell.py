"""Shell execution utilities.

Provides subprocess execution with captured output and PowerShell
executable discovery.
"""

import base64
import shutil
import subprocess
from dataclasses import dataclass

# Probe order: PowerShell 7 first, then Windows PowerShell 5.1.
POWERSHELL_CANDIDATES: tuple[str, ...] = ("pwsh", "pwsh.exe", "powershell.exe", "powershell")


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 600.0,
    cwd: str | None = None,
    encoding: str | None = None,
) -> CommandResult:
    """Execute a command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.
        encoding: Output encoding. If None, uses the locale encoding.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
        encoding=encoding,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def find_powershell(preferred: str | None = None) -> str | None:
    """Locate a PowerShell executable.

    Args:
        preferred: Explicit executable name or path. When given, it is the
            only candidate tried.

    Returns:
        Resolved executable path, or None if no PowerShell is installed.
    """
    candidates = (preferred,) if preferred else POWERSHELL_CANDIDATES
    for candidate in candidates:
        resolved = shutil.which(candidate)
        if resolved:
            return resolved
    return None


def quote_powershell(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal.

    Args:
        value: Raw string (path, name, GUID).

    Returns:
        Literal safe to splice into a PowerShell script.
    """
    return "'" + value.replace("'", "''") + "'"


def powershell_command(executable: str, script: str) -> list[str]:
    """Build the argument list that runs a PowerShell script.

    The script is passed with ``-EncodedCommand`` (base64 of UTF-16LE) so
    quotes inside it survive Windows command-line re-parsing.

    Args:
        executable: PowerShell executable path.
        script: Script text.

    Returns:
        Argument list for run_command().
    """
    encoded = base64.b64encode(script.encode("utf-16-le")).decode("ascii")
    return [executable, "-NoProfile", "-NonInteractive", "-EncodedCommand", encoded]
