"""CLI package for gpobackup.

This package contains the Typer application and its output helpers.
"""

from gpobackup.cli.main import app

__all__ = ["app"]
