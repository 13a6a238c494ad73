"""Directory object models.

This module defines the Group Policy Object and WMI filter records
returned by directory queries, and the file-name rules used when they
are written to disk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

# Characters Windows refuses in file names, plus ASCII control characters.
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_file_name(name: str) -> str:
    """Make a directory object's name usable as a file or folder name.

    Invalid characters become ``_``; trailing dots and spaces are
    stripped because Windows silently drops them.

    Args:
        name: Display name or filter name.

    Returns:
        Sanitized name, never empty.
    """
    cleaned = _INVALID_NAME_CHARS.sub("_", name).rstrip(". ")
    return cleaned or "_"


@dataclass(frozen=True, slots=True)
class GpoInfo:
    """A Group Policy Object as listed by the directory.

    Attributes:
        id: GPO GUID (without braces).
        display_name: Human-readable GPO name.
    """

    id: str
    display_name: str

    def __post_init__(self) -> None:
        """Validate GPO data after initialization."""
        if not self.id:
            msg = "GPO id cannot be empty"
            raise ValueError(msg)
        if not self.display_name:
            msg = "GPO display name cannot be empty"
            raise ValueError(msg)

    @property
    def folder_name(self) -> str:
        """Name of this GPO's folder inside the daily folder."""
        return safe_file_name(self.display_name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GpoInfo:
        """Build from a ``Get-GPO`` JSON record.

        Raises:
            KeyError: If Id or DisplayName is missing.
            ValueError: If either value is empty.
        """
        return cls(id=str(data["Id"]), display_name=str(data["DisplayName"]))


@dataclass(frozen=True, slots=True)
class WmiFilter:
    """A WMI filter (``msWMI-Som``) object.

    Attributes:
        name: Value of the filter's ``msWMI-Name`` attribute.
        distinguished_name: LDAP DN used to re-read the full object.
        properties: Remaining attributes returned by the listing query.
    """

    name: str
    distinguished_name: str
    properties: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate filter data after initialization."""
        if not self.name:
            msg = "WMI filter name cannot be empty"
            raise ValueError(msg)
        if not self.distinguished_name:
            msg = "WMI filter distinguished name cannot be empty"
            raise ValueError(msg)

    @property
    def file_stem(self) -> str:
        """Name of the serialized file inside the filters folder, without suffix."""
        return safe_file_name(self.name)

    @property
    def filter_id(self) -> str:
        """Unique filter identifier: ``msWMI-ID``, else the DN's leading CN."""
        value = self.properties.get("msWMI-ID")
        if value:
            return str(value)
        return self.distinguished_name.split(",", 1)[0].split("=", 1)[-1]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WmiFilter:
        """Build from a ``Get-ADObject`` JSON record.

        Raises:
            KeyError: If msWMI-Name or DistinguishedName is missing.
            ValueError: If either value is empty.
        """
        properties = {
            key: value
            for key, value in data.items()
            if key not in ("msWMI-Name", "DistinguishedName")
        }
        return cls(
            name=str(data["msWMI-Name"]),
            distinguished_name=str(data["DistinguishedName"]),
            properties=properties,
        )
