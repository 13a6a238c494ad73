"""Access-control checks for backup paths."""

from gpobackup.security.permissions import (
    AccessEntry,
    AclSnapshot,
    check_delete_permission,
    grants_delete,
)

__all__ = ["AccessEntry", "AclSnapshot", "check_delete_permission", "grants_delete"]
