"""Backup settings and configuration file loading.

Settings are read from ~/.config/gpobackup/config.toml when it exists.
Every setting has a default, so the file is optional; command-line
options override whatever the file provides.
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gpobackup.core.paths import get_config_path
from gpobackup.models.backup import ExportErrorPolicy

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30


class BackupSettings(BaseModel):
    """Settings for a backup run.

    Attributes:
        retention_days: Daily folders older than this many days are deleted.
        on_error: Whether a failed GPO/filter export aborts the run.
        powershell: Explicit PowerShell executable (None = auto-detect).
        command_timeout: Seconds allowed for each PowerShell call.
        record_history: Append a record of each run to the run log.
    """

    model_config = ConfigDict(extra="forbid")

    retention_days: Annotated[
        int,
        Field(ge=0, description="Retention window in days"),
    ] = DEFAULT_RETENTION_DAYS
    on_error: Annotated[
        ExportErrorPolicy,
        Field(description="Export error policy"),
    ] = ExportErrorPolicy.ABORT
    powershell: Annotated[
        str | None,
        Field(description="PowerShell executable (None = auto-detect)"),
    ] = None
    command_timeout: Annotated[
        int,
        Field(ge=10, le=7200, description="Timeout per PowerShell call (10-7200)"),
    ] = 600
    record_history: Annotated[
        bool,
        Field(description="Write each run to the run log"),
    ] = True


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_settings(path: Path | None = None) -> BackupSettings:
    """Load backup settings from a TOML file.

    Args:
        path: Explicit config file. If None, the default config path is
            used and a missing file yields default settings.

    Returns:
        Validated BackupSettings object.

    Raises:
        ConfigNotFoundError: If an explicit path doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return BackupSettings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return BackupSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e
