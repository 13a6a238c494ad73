"""gpobackup - scheduled Group Policy backup for Active Directory."""

__version__ = "0.1.0"
