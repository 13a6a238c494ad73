"""Unit tests for the gpobackup command.

The directory backend and runner are patched; these tests cover option
handling, exit codes, console output, and the run log.
"""

import json
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from gpobackup import __version__
from gpobackup.cli.main import app
from gpobackup.core.config import BackupSettings
from gpobackup.models.backup import (
    ExportErrorPolicy,
    ExportFailure,
    ExportResult,
    RetentionAction,
    RetentionResult,
    RunSummary,
)
from gpobackup.models.errors import ExportError
from gpobackup.models.gpo import GpoInfo
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def xdg_env(tmp_path: Path):
    """Point config and state directories into tmp_path."""
    env = {
        "XDG_CONFIG_HOME": str(tmp_path / "config"),
        "XDG_STATE_HOME": str(tmp_path / "state"),
    }
    with patch.dict(os.environ, env):
        yield tmp_path


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    root = tmp_path / "backups"
    root.mkdir()
    return root


@pytest.fixture
def mock_directory():
    """Patch the PowerShell backend with an available mock."""
    with patch("gpobackup.cli.main.PowerShellDirectory") as mock_cls:
        mock_cls.return_value.is_available.return_value = True
        yield mock_cls


@pytest.fixture
def mock_runner():
    """Patch BackupRunner; tests set run's return value or side effect."""
    with patch("gpobackup.cli.main.BackupRunner") as mock_cls:
        yield mock_cls


def _summary(root: Path, **fields) -> RunSummary:
    daily = root / "2024-07-20"
    gpo = GpoInfo(id="31b2f340-016d-11d2-945f-00c04fb984f9", display_name="Default Domain Policy")
    summary = RunSummary(
        backup_root=root,
        daily_folder=daily,
        exports=[
            ExportResult(gpo=gpo, folder=daily / gpo.folder_name, report_path=daily / "r.html")
        ],
        filter_files=[daily / "WMI_Filters" / "Windows 11.xml"],
    )
    for key, value in fields.items():
        setattr(summary, key, value)
    return summary


def _run_log(state_root: Path) -> list[dict]:
    path = state_root / "state" / "gpobackup" / "runs.jsonl"
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestBasics:
    """Tests for help and version."""

    def test_version(self) -> None:
        """--version prints the version and exits 0."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"gpobackup version {__version__}" in result.output

    def test_help(self) -> None:
        """--help lists the retention option."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "--retention-days" in result.output

    def test_negative_retention_rejected(self, backup_root: Path) -> None:
        """Typer rejects negative retention windows."""
        result = runner.invoke(app, [str(backup_root), "--retention-days", "-1"])

        assert result.exit_code == 2


class TestMainCommand:
    """Tests for a backup invocation."""

    def test_missing_backup_path(self, xdg_env: Path, mock_directory, mock_runner) -> None:
        """A missing backup root exits 1 before touching the directory."""
        result = runner.invoke(app, [str(xdg_env / "missing")])

        assert result.exit_code == 1
        assert "does not exist" in result.output
        mock_directory.assert_not_called()
        mock_runner.assert_not_called()

    def test_powershell_unavailable(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """Without PowerShell the run exits 1."""
        mock_directory.return_value.is_available.return_value = False

        result = runner.invoke(app, [str(backup_root)])

        assert result.exit_code == 1
        assert "PowerShell was not found" in result.output
        mock_runner.assert_not_called()

    def test_successful_run(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """A clean run exits 0, prints a summary, and is logged."""
        mock_runner.return_value.run.return_value = _summary(
            backup_root,
            retention=[
                RetentionResult("2023-01-01", RetentionAction.DELETED, age_days=566),
                RetentionResult("2024-07-20", RetentionAction.KEPT, age_days=0),
            ],
        )

        result = runner.invoke(app, [str(backup_root)])

        assert result.exit_code == 0
        assert "Backed up 1 GPO(s)" in result.output
        assert "Exported 1 WMI filter(s)." in result.output
        assert "Deleted 1 folder(s) older than 30 days." in result.output

        records = _run_log(xdg_env)
        assert len(records) == 1
        assert records[0]["success"] is True
        assert records[0]["deleted_folders"] == ["2023-01-01"]
        assert records[0]["metadata"]["retention_days"] == 30

    def test_options_override_settings(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """Command-line options win over the config file."""
        config_dir = xdg_env / "config" / "gpobackup"
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('retention_days = 90\npowershell = "pwsh"\n')
        mock_runner.return_value.run.return_value = _summary(backup_root)

        result = runner.invoke(
            app,
            [str(backup_root), "--retention-days", "7", "--on-error", "continue"],
        )

        assert result.exit_code == 0
        settings: BackupSettings = mock_runner.call_args.args[1]
        assert settings.retention_days == 7
        assert settings.on_error == ExportErrorPolicy.CONTINUE
        assert settings.powershell == "pwsh"
        mock_directory.assert_called_once_with(executable="pwsh", timeout=600.0)

    def test_dry_run_retention(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """--dry-run-retention reaches the runner and the summary."""
        mock_runner.return_value.run.return_value = _summary(
            backup_root,
            retention=[RetentionResult("2023-01-01", RetentionAction.WOULD_DELETE, age_days=566)],
        )

        result = runner.invoke(app, [str(backup_root), "--dry-run-retention"])

        assert result.exit_code == 0
        assert mock_runner.call_args.kwargs["dry_run_retention"] is True
        assert "Dry-run: 1 folder(s)" in result.output

    def test_export_failure_aborts(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """An aborting export error exits 1 and is logged as a failed run."""
        mock_runner.return_value.run.side_effect = ExportError("Backup-GPO failed for 'X'")
        mock_runner.return_value.daily_folder = backup_root / "2024-07-20"

        result = runner.invoke(app, [str(backup_root)])

        assert result.exit_code == 1
        assert "Backup-GPO failed" in result.output
        records = _run_log(xdg_env)
        assert records[0]["success"] is False
        assert records[0]["error"] == "Backup-GPO failed for 'X'"
        assert records[0]["daily_folder"] == "2024-07-20"

    def test_continue_with_failures_exits_1(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """Recorded failures make the run exit 1 after the summary."""
        mock_runner.return_value.run.return_value = _summary(
            backup_root,
            failures=[ExportFailure("Workstations: Firewall", "access denied")],
        )

        result = runner.invoke(app, [str(backup_root), "--on-error", "continue"])

        assert result.exit_code == 1
        assert "access denied" in result.output
        assert "No folders older than 30 days." in result.output
        assert _run_log(xdg_env)[0]["failures"] == ["Workstations: Firewall"]

    def test_history_disabled(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """record_history = false leaves no run log."""
        config = xdg_env / "settings.toml"
        config.write_text("record_history = false\n")
        mock_runner.return_value.run.return_value = _summary(backup_root)

        result = runner.invoke(app, [str(backup_root), "--config", str(config)])

        assert result.exit_code == 0
        assert not (xdg_env / "state" / "gpobackup" / "runs.jsonl").exists()

    def test_missing_explicit_config(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """An explicit config path that does not exist exits 1."""
        result = runner.invoke(app, [str(backup_root), "-c", str(xdg_env / "nope.toml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output
        mock_runner.assert_not_called()

    def test_run_log_failure_only_warns(
        self, xdg_env: Path, backup_root: Path, mock_directory, mock_runner
    ) -> None:
        """A run log that cannot be written does not change the exit code."""
        mock_runner.return_value.run.return_value = _summary(backup_root)
        failing_log = MagicMock()
        failing_log.return_value.record.side_effect = OSError("disk full")

        with patch("gpobackup.cli.main.RunLog", failing_log):
            result = runner.invoke(app, [str(backup_root)])

        assert result.exit_code == 0
        assert "Could not record run" in result.output
