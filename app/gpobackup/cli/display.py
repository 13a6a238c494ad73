"""Rich display functions for backup run results."""

from rich.table import Table

from gpobackup.models.backup import RetentionAction, RetentionResult, RunSummary
from gpobackup.utils.formatting import (
    console,
    create_table,
    print_info,
    print_success,
    print_warning,
)

_STATUS_LABELS: dict[RetentionAction, str] = {
    RetentionAction.DELETED: "[deleted]deleted[/]",
    RetentionAction.WOULD_DELETE: "[warning]would delete[/]",
    RetentionAction.KEPT: "[kept]kept[/]",
    RetentionAction.SKIPPED_UNPARSEABLE: "[muted]skipped[/]",
    RetentionAction.FAILED: "[error]failed[/]",
}


def create_retention_table(results: list[RetentionResult], dry_run: bool = False) -> Table:
    """Create a table of retention outcomes.

    Args:
        results: Per-folder retention results.
        dry_run: Whether the sweep was a dry-run (changes table title).

    Returns:
        Rich Table with Folder, Age, Status, and Details columns.
    """
    table = create_table("Retention (Dry Run)" if dry_run else "Retention")
    table.add_column("Folder", no_wrap=True)
    table.add_column("Age", justify="right", width=8)
    table.add_column("Status", width=14)
    table.add_column("Details", style="muted")

    for result in results:
        age = f"{result.age_days}d" if result.age_days is not None else "-"
        table.add_row(result.name, age, _STATUS_LABELS[result.action], result.error or "")

    return table


def print_run_summary(summary: RunSummary, retention_days: int, dry_run: bool = False) -> None:
    """Print the outcome of a backup run.

    Args:
        summary: Completed run summary.
        retention_days: Retention window used for the sweep.
        dry_run: Whether retention ran in dry-run mode.
    """
    print_success(f"Backed up {len(summary.exports)} GPO(s) to {summary.daily_folder}")

    if summary.filter_files:
        print_info(f"Exported {len(summary.filter_files)} WMI filter(s).")
    else:
        print_info("No WMI filters exported.")

    for failure in summary.failures:
        print_warning(f"{failure.name}: {failure.error}")

    if summary.retention:
        console.print(create_retention_table(summary.retention, dry_run))

    removed = summary.removed_folders
    if dry_run:
        print_info(f"Dry-run: {len(removed)} folder(s) older than {retention_days} days.")
    elif removed:
        print_info(f"Deleted {len(removed)} folder(s) older than {retention_days} days.")
    else:
        print_info(f"No folders older than {retention_days} days.")
