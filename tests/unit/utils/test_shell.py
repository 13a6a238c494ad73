"""Unit tests for shell execution utilities."""

import base64
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from gpobackup.utils.shell import (
    POWERSHELL_CANDIDATES,
    CommandResult,
    find_powershell,
    powershell_command,
    quote_powershell,
    run_command,
)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success_on_zero_exit(self) -> None:
        """Exit code 0 is success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success is True

    def test_failure_on_nonzero_exit(self) -> None:
        """Any non-zero exit code is failure."""
        assert CommandResult(stdout="", stderr="boom", returncode=1).success is False


class TestRunCommand:
    """Tests for run_command function."""

    @patch("gpobackup.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command returns captured stdout, stderr, and exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=2)

        result = run_command(["tool", "--flag"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=2)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True

    @patch("gpobackup.utils.shell.subprocess.run")
    def test_passes_timeout_and_encoding(self, mock_run: MagicMock) -> None:
        """run_command forwards timeout and encoding."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["tool"], timeout=5.0, encoding="utf-8")

        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout"] == 5.0
        assert kwargs["encoding"] == "utf-8"

    @patch("gpobackup.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        """A hung command raises TimeoutExpired to the caller."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["tool"], timeout=1.0)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["tool"], timeout=1.0)


class TestFindPowershell:
    """Tests for find_powershell function."""

    def test_prefers_first_candidate(self) -> None:
        """pwsh wins over Windows PowerShell when both exist."""
        with patch("gpobackup.utils.shell.shutil.which", side_effect=lambda c: f"/bin/{c}"):
            assert find_powershell() == "/bin/pwsh"

    def test_falls_back_to_windows_powershell(self) -> None:
        """powershell.exe is used when no pwsh is installed."""
        found = {"powershell.exe": r"C:\Windows\System32\powershell.exe"}
        with patch("gpobackup.utils.shell.shutil.which", side_effect=found.get):
            assert find_powershell() == r"C:\Windows\System32\powershell.exe"

    def test_none_when_missing(self) -> None:
        """find_powershell returns None when nothing is installed."""
        with patch("gpobackup.utils.shell.shutil.which", return_value=None) as mock_which:
            assert find_powershell() is None

        assert mock_which.call_count == len(POWERSHELL_CANDIDATES)

    def test_preferred_is_only_candidate(self) -> None:
        """An explicit executable disables auto-detection."""
        with patch("gpobackup.utils.shell.shutil.which", return_value=None) as mock_which:
            assert find_powershell("custom-pwsh") is None

        mock_which.assert_called_once_with("custom-pwsh")


class TestPowershellHelpers:
    """Tests for PowerShell quoting and command building."""

    def test_quote_plain(self) -> None:
        """Plain values are wrapped in single quotes."""
        assert quote_powershell("Default Domain Policy") == "'Default Domain Policy'"

    def test_quote_doubles_embedded_quotes(self) -> None:
        """Embedded single quotes are doubled."""
        assert quote_powershell("O'Brien's GPO") == "'O''Brien''s GPO'"

    def test_command_uses_encoded_script(self) -> None:
        """The script is passed base64-encoded as UTF-16LE."""
        args = powershell_command("pwsh", "Get-GPO -All")

        assert args[:4] == ["pwsh", "-NoProfile", "-NonInteractive", "-EncodedCommand"]
        assert base64.b64decode(args[4]).decode("utf-16-le") == "Get-GPO -All"
