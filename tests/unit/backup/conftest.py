"""Fixtures for backup tests: an in-memory directory backend."""

from pathlib import Path

import pytest
from gpobackup.directory.base import DirectoryService
from gpobackup.models.errors import ExportError, GpoNotFoundError
from gpobackup.models.gpo import GpoInfo, WmiFilter


class FakeDirectory(DirectoryService):
    """Directory backend that writes placeholder files instead of calling AD."""

    def __init__(
        self,
        gpos: list[GpoInfo] | None = None,
        filters: list[WmiFilter] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.gpos = gpos or []
        self.filters = filters or []
        self.failing = failing or set()
        self.backed_up: list[str] = []

    def is_available(self) -> bool:
        return True

    def list_gpos(self) -> list[GpoInfo]:
        return list(self.gpos)

    def resolve_gpo(self, name: str) -> GpoInfo:
        for gpo in self.gpos:
            if gpo.display_name == name:
                return gpo
        raise GpoNotFoundError(name)

    def backup_gpo(self, gpo: GpoInfo, destination: Path) -> str:
        if gpo.display_name in self.failing:
            msg = f"Backup-GPO failed for '{gpo.display_name}': access denied"
            raise ExportError(msg)
        artifact = destination / f"{{{gpo.id}}}"
        artifact.mkdir()
        (artifact / "Backup.xml").write_text("<GroupPolicyBackupScheme/>")
        self.backed_up.append(gpo.display_name)
        return f"backup-{gpo.id}"

    def write_report(self, gpo: GpoInfo, path: Path) -> None:
        path.write_text(f"<html>{gpo.display_name}</html>", encoding="utf-8")

    def list_wmi_filters(self) -> list[WmiFilter]:
        return list(self.filters)

    def export_wmi_filter(self, wmi_filter: WmiFilter, path: Path) -> None:
        if wmi_filter.name in self.failing:
            msg = f"Export of WMI filter '{wmi_filter.name}' failed"
            raise ExportError(msg)
        path.write_text(f"<Objs>{wmi_filter.name}</Objs>", encoding="utf-8")


@pytest.fixture
def sample_gpos() -> list[GpoInfo]:
    """Two GPOs, one with a name that needs sanitizing."""
    return [
        GpoInfo(id="31b2f340-016d-11d2-945f-00c04fb984f9", display_name="Default Domain Policy"),
        GpoInfo(id="0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0", display_name="Workstations: Firewall"),
    ]


@pytest.fixture
def sample_filter() -> WmiFilter:
    """A single WMI filter."""
    return WmiFilter(
        name="Windows 11",
        distinguished_name="CN={A1},CN=SOM,CN=WMIPolicy,CN=System,DC=corp,DC=example",
    )


@pytest.fixture
def fake_directory(sample_gpos: list[GpoInfo]) -> FakeDirectory:
    """Fake backend with the sample GPOs and no filters."""
    return FakeDirectory(gpos=sample_gpos)


@pytest.fixture
def directory_factory() -> type[FakeDirectory]:
    """The fake backend class, for tests that need custom contents."""
    return FakeDirectory
