"""Run log persistence.

This module provides the RunLog class for appending run records to a
JSONL file.
"""

from pathlib import Path

from gpobackup.core.paths import ensure_state_dir, get_state_dir
from gpobackup.models.run import RunRecord


class RunLog:
    """Append-only log of backup runs.

    Storage location: ~/.local/state/gpobackup/runs.jsonl

    Each line is a complete JSON object representing a RunRecord.

    Attributes:
        state_dir: Directory containing the run log.
    """

    LOG_FILENAME = "runs.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize RunLog.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/gpobackup
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def path(self) -> Path:
        """Path to the runs.jsonl file."""
        return self._state_dir / self.LOG_FILENAME

    def record(self, entry: RunRecord) -> None:
        """Append a run record.

        Args:
            entry: The record to append.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()
