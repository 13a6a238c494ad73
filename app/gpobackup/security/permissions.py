"""Delete-permission check for the backup root.

Answers one question before the retention sweep runs: may the current
principal delete inside this path? The answer comes from the path's
access-control entries. On Windows they are read with ``Get-Acl``; on
POSIX systems the owner/group/other mode bits play the same role.

Reading access-control data never raises to the caller. Any failure is
logged as a warning and treated as "no permission".
"""

from __future__ import annotations

import json
import logging
import os
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gpobackup.utils.shell import (
    find_powershell,
    powershell_command,
    quote_powershell,
    run_command,
)

logger = logging.getLogger(__name__)

# FileSystemRights masks. FullControl (0x1F01FF) is a superset of Modify.
MODIFY = 0x000301BF
GENERIC_ALL = 0x10000000

_ACL_SCRIPT = """\
$ErrorActionPreference = 'Stop'
$acl = Get-Acl -LiteralPath {path}
$id = [System.Security.Principal.WindowsIdentity]::GetCurrent()
$principal = New-Object System.Security.Principal.WindowsPrincipal($id)
$names = @($id.Name)
foreach ($g in $id.Groups) {{
    try {{ $names += $g.Translate([System.Security.Principal.NTAccount]).Value }}
    catch {{ $names += $g.Value }}
}}
$entries = @($acl.Access | ForEach-Object {{
    @{{ Identity = $_.IdentityReference.Value; Rights = [int64]$_.FileSystemRights;
        Type = $_.AccessControlType.ToString() }}
}})
$admin = $principal.IsInRole([System.Security.Principal.WindowsBuiltInRole]::Administrator)
ConvertTo-Json -Compress -Depth 4 -InputObject @{{
    Identities = $names; IsAdmin = $admin; Entries = $entries
}}
"""


@dataclass(frozen=True, slots=True)
class AccessEntry:
    """One access-control entry.

    Attributes:
        identity: Account or group the entry applies to.
        rights: FileSystemRights bit mask.
        allow: False for deny entries.
    """

    identity: str
    rights: int
    allow: bool = True

    @property
    def grants_modify(self) -> bool:
        """True if this entry allows Modify or Full Control."""
        if not self.allow:
            return False
        if self.rights & GENERIC_ALL:
            return True
        return (self.rights & MODIFY) == MODIFY


@dataclass(frozen=True, slots=True)
class AclSnapshot:
    """Access-control data for a path, as seen by the current principal.

    Attributes:
        identities: Names of the principal and every group it belongs to.
        is_admin: Whether the principal holds the administrator role.
        entries: Access-control entries on the path.
    """

    identities: frozenset[str]
    is_admin: bool
    entries: tuple[AccessEntry, ...]


def grants_delete(snapshot: AclSnapshot) -> bool:
    """Decide whether a snapshot gives the principal delete rights.

    Args:
        snapshot: Access-control data for the path.

    Returns:
        True for administrators, or if an allow entry granting Modify or
        Full Control names the principal or one of its groups.
    """
    if snapshot.is_admin:
        return True
    identities = {name.casefold() for name in snapshot.identities}
    return any(
        entry.grants_modify and entry.identity.casefold() in identities
        for entry in snapshot.entries
    )


def parse_windows_acl(data: dict[str, Any]) -> AclSnapshot:
    """Build a snapshot from the ``Get-Acl`` script's JSON output.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a field has the wrong type.
    """
    raw_entries = data["Entries"] or []
    if isinstance(raw_entries, dict):
        raw_entries = [raw_entries]
    raw_identities = data["Identities"] or []
    if isinstance(raw_identities, str):
        raw_identities = [raw_identities]

    entries = tuple(
        AccessEntry(
            identity=str(entry["Identity"]),
            rights=int(entry["Rights"]) & 0xFFFFFFFF,
            allow=str(entry.get("Type", "Allow")).casefold() == "allow",
        )
        for entry in raw_entries
    )
    return AclSnapshot(
        identities=frozenset(str(name) for name in raw_identities),
        is_admin=bool(data["IsAdmin"]),
        entries=entries,
    )


def read_windows_acl(
    path: Path, executable: str | None = None, timeout: float = 60.0
) -> AclSnapshot:
    """Read a path's ACL and the current identity through PowerShell.

    Args:
        path: Directory whose ACL is read.
        executable: PowerShell executable; discovered on PATH if None.
        timeout: Seconds allowed for the script.

    Raises:
        RuntimeError: If PowerShell is missing or the script fails.
        OSError: If PowerShell cannot be started.
        subprocess.TimeoutExpired: If the script hangs.
        ValueError: If the output cannot be decoded.
    """
    resolved = find_powershell(executable)
    if resolved is None:
        msg = "PowerShell is not available to read access control lists"
        raise RuntimeError(msg)

    script = _ACL_SCRIPT.format(path=quote_powershell(str(path)))
    result = run_command(powershell_command(resolved, script), timeout=timeout, encoding="utf-8")
    if not result.success:
        msg = f"Get-Acl failed: {result.stderr.strip() or result.returncode}"
        raise RuntimeError(msg)

    data = json.loads(result.stdout.strip().lstrip("\ufeff"))
    if not isinstance(data, dict):
        msg = f"Unexpected Get-Acl output: {result.stdout[:100]!r}"
        raise ValueError(msg)
    try:
        return parse_windows_acl(data)
    except KeyError as e:
        msg = f"Get-Acl output is missing {e}"
        raise ValueError(msg) from e
    except (TypeError, AttributeError) as e:
        msg = f"Get-Acl output has an unexpected shape: {e}"
        raise ValueError(msg) from e


def _mode_rights(mode: int, write_bit: int, exec_bit: int) -> int:
    """Map a mode-bit triplet to a rights mask.

    Deleting a directory entry needs write and search permission on it.
    """
    if mode & write_bit and mode & exec_bit:
        return MODIFY
    return 0


def read_posix_acl(path: Path) -> AclSnapshot:
    """Treat the owner/group/other mode bits as access-control entries.

    Only the class that applies to the current process is listed as an
    identity, mirroring how the kernel picks exactly one triplet.

    Raises:
        OSError: If the path cannot be stat'ed.
    """
    st = os.stat(path)
    mode = st.st_mode
    uid = os.geteuid()
    groups = {os.getegid(), *os.getgroups()}

    if uid == st.st_uid:
        identity = "owner"
    elif st.st_gid in groups:
        identity = "group"
    else:
        identity = "other"

    entries = (
        AccessEntry("owner", _mode_rights(mode, stat.S_IWUSR, stat.S_IXUSR)),
        AccessEntry("group", _mode_rights(mode, stat.S_IWGRP, stat.S_IXGRP)),
        AccessEntry("other", _mode_rights(mode, stat.S_IWOTH, stat.S_IXOTH)),
    )
    return AclSnapshot(identities=frozenset({identity}), is_admin=uid == 0, entries=entries)


def read_acl(
    path: Path, executable: str | None = None, timeout: float = 60.0
) -> AclSnapshot:
    """Read access-control data with the reader for this platform.

    The executable and timeout only apply to the Windows reader.
    """
    if os.name == "nt":
        return read_windows_acl(path, executable, timeout)
    return read_posix_acl(path)


def check_delete_permission(
    path: Path, *, executable: str | None = None, timeout: float = 60.0
) -> bool:
    """Check whether the current principal may delete within a path.

    Args:
        path: Directory to check.
        executable: PowerShell executable for reading Windows ACLs.
        timeout: Seconds allowed for reading the ACL.

    Returns:
        True if delete-equivalent rights are held. False if the path is
        missing, the rights are absent, or the ACL cannot be read.
    """
    if not path.exists():
        logger.warning("Path does not exist: %s", path)
        return False

    try:
        snapshot = read_acl(path, executable, timeout)
    except (
        OSError,
        RuntimeError,
        ValueError,
        TypeError,
        AttributeError,
        subprocess.TimeoutExpired,
    ) as e:
        logger.warning("Could not read access control for %s: %s", path, e)
        return False

    allowed = grants_delete(snapshot)
    logger.debug("Delete permission on %s: %s", path, allowed)
    return allowed
